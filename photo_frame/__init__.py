"""Photo frame engine: event-sourced photo registry, reconciler and display scheduler."""

__version__ = "1.0.0"
__author__ = "Photo Frame Team"

# Import key classes for convenient top-level access
from .config import StoragePaths, StorageRootError
from .registry import RegistryWriter, RegistryReader
from .reconcile import Reconciler, ReconcilerService
from .scheduling import DisplayScheduler, SchedulerContext, SchedulerLoop, HistoryRandomPicker
from .storage import ImageStorage, render_for_frame
from .ingest import PhotoProcessor
from .events import MemoryBus, SpoolBus
from .models import PhotoRecord, TombstoneRecord, PhotoOrigin, AppConfig, AppState, QuietHours

__all__ = [
    # Core classes
    'StoragePaths',
    'StorageRootError',
    'RegistryWriter',
    'RegistryReader',
    'Reconciler',
    'ReconcilerService',
    'DisplayScheduler',
    'SchedulerContext',
    'SchedulerLoop',
    'HistoryRandomPicker',

    # Storage and ingestion
    'ImageStorage',
    'render_for_frame',
    'PhotoProcessor',

    # Transports
    'MemoryBus',
    'SpoolBus',

    # Data models
    'PhotoRecord',
    'TombstoneRecord',
    'PhotoOrigin',
    'AppConfig',
    'AppState',
    'QuietHours',

    # Package metadata
    '__version__',
    '__author__'
]
