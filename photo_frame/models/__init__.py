"""Data models for the photo frame engine."""

from .records import (
    PhotoOrigin, PhotoStorage, PhotoRecord, TombstoneRecord, RegistryRecord,
    record_from_dict, PHOTO_KIND, TOMBSTONE_KIND,
)
from .scheduler import QuietHours, AppConfig, AppState

__all__ = [
    'PhotoOrigin', 'PhotoStorage', 'PhotoRecord', 'TombstoneRecord', 'RegistryRecord',
    'record_from_dict', 'PHOTO_KIND', 'TOMBSTONE_KIND',
    'QuietHours', 'AppConfig', 'AppState',
]
