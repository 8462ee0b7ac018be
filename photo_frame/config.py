#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Global configuration and constants for the photo frame engine.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

# Stored photos are always re-encoded to JPEG
IMAGE_EXT = ".jpg"
SOURCE_IMAGE_EXT = {".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tiff", ".webp"}

# Data root layout
DATA_DIR_ENV = "PHOTO_FRAME_DATA"
DEFAULT_DATA_DIRNAME = ".photo-frame-data"
PHOTOS_DIRNAME = "photos"
REGISTRY_FILENAME = "photos.jsonl"
CONFIG_FILENAME = "config.json"
STATE_FILENAME = "scheduler-state.json"
BUS_DIRNAME = "bus"

# Scheduler defaults
DEFAULT_MIN_SHUFFLE_MINUTES = 1
DEFAULT_SHUFFLE_MINUTES = 5
DEFAULT_HISTORY_COOLDOWN = 5

# Reconciler runs at boot and then daily at this local time
DEFAULT_RECONCILE_AT: Tuple[int, int] = (3, 30)
DEFAULT_MISSING_GRACE_SECONDS = 0

# Frame geometry and encoding
FRAME_WIDTH = 800
FRAME_HEIGHT = 480
FRAME_BACKGROUND = (255, 255, 255)
FRAME_JPEG_QUALITY = 50
SMALL_BAR_RATIO = 0.10  # letterbox bars up to this size: contain
BIG_BAR_RATIO = 0.30  # letterbox bars from this size: cover

DOWNLOAD_TIMEOUT_SECONDS = 30
BUS_POLL_SECONDS = 0.5

# Placeholder provenance for files that appear without a registry entry
UNKNOWN_USERNAME = "Unknown"
UNKNOWN_NAME = "-"


class StorageRootError(RuntimeError):
    """Raised at startup when the data root cannot be created or written."""


@dataclass(frozen=True)
class StoragePaths:
    """Every on-disk location, derived from a single data root."""
    root: Path

    @property
    def photos_dir(self) -> Path:
        return self.root / PHOTOS_DIRNAME

    @property
    def registry_file(self) -> Path:
        return self.root / REGISTRY_FILENAME

    @property
    def config_file(self) -> Path:
        return self.root / CONFIG_FILENAME

    @property
    def state_file(self) -> Path:
        return self.root / STATE_FILENAME

    @property
    def bus_dir(self) -> Path:
        return self.root / BUS_DIRNAME

    @classmethod
    def resolve(cls, data_dir: Optional[str] = None) -> "StoragePaths":
        """CLI value wins over the environment, which wins over the default."""
        raw = data_dir or os.environ.get(DATA_DIR_ENV) or DEFAULT_DATA_DIRNAME
        return cls(Path(raw).expanduser().resolve())

    def ensure(self) -> "StoragePaths":
        """Create the data root and photo store; fatal if not writable."""
        try:
            self.photos_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageRootError(f"Cannot create data root {self.root}: {e}") from e
        if not os.access(self.root, os.W_OK) or not os.access(self.photos_dir, os.W_OK):
            raise StorageRootError(f"Data root is not writable: {self.root}")
        return self
