#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Physical photo store: one `<photoId>.jpg` file per photo in a flat directory.
"""

import logging
from pathlib import Path
from typing import List, Union

from ..config import IMAGE_EXT
from ..registry.writer import strip_image_ext
from ..utils.path import atomic_write_bytes, ensure_dir

logger = logging.getLogger(__name__)


class ImageStorage:
    """Save, delete and list stored photos."""

    def __init__(self, photos_dir: Union[str, Path]):
        self.photos_dir = Path(photos_dir)
        ensure_dir(self.photos_dir)

    def full_path(self, name: str) -> Path:
        """Absolute path for a photo id or filename.

        An id resolves to the stored file whatever the case of its extension
        (`IMG1` -> `IMG1.JPG`); ids with no file yet map to `<id>.jpg`.
        """
        if name.lower().endswith(IMAGE_EXT):
            return (self.photos_dir / name).resolve()
        path = self.photos_dir / f"{name}{IMAGE_EXT}"
        if not path.is_file():
            for filename in self.list_images():
                if strip_image_ext(filename) == name:
                    path = self.photos_dir / filename
                    break
        return path.resolve()

    def save_image(self, photo_id: str, data: bytes) -> Path:
        path = self.full_path(photo_id)
        atomic_write_bytes(path, data)
        logger.debug("Stored %s (%d bytes)", path, len(data))
        return path

    def delete_image(self, photo_id: str) -> bool:
        """Remove the stored file; a file that is already gone is not an error."""
        path = self.full_path(photo_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def exists(self, photo_id: str) -> bool:
        return self.full_path(photo_id).is_file()

    def list_images(self) -> List[str]:
        """Stored filenames (with extension), sorted."""
        if not self.photos_dir.exists():
            return []
        return sorted(
            p.name for p in self.photos_dir.iterdir()
            if p.is_file() and p.name.lower().endswith(IMAGE_EXT) and not p.name.startswith(".")
        )

    def list_photo_ids(self) -> List[str]:
        """Distinct ids of stored files; `a.jpg` and `a.JPG` are one photo."""
        return list(dict.fromkeys(strip_image_ext(name) for name in self.list_images()))
