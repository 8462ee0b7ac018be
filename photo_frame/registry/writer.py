#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Append-only writer for the photo registry log.

Every call appends exactly one JSON line. Existing lines are never rewritten;
no check is made against what the log already contains.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..config import IMAGE_EXT
from ..models.records import PhotoOrigin, PhotoRecord, PhotoStorage, RegistryRecord, TombstoneRecord
from ..utils.path import ensure_dir
from ..utils.time import now_iso

try:
    import fcntl  # POSIX only
except ImportError:
    fcntl = None

logger = logging.getLogger(__name__)


def strip_image_ext(name: str) -> str:
    """Logical photo id for a stored filename: the basename without `.jpg`."""
    base = os.path.basename(name)
    return base[:-len(IMAGE_EXT)] if base.lower().endswith(IMAGE_EXT) else base


class RegistryWriter:
    """Appends photo and tombstone records to the registry log."""

    def __init__(self, registry_file: Union[str, Path], durable: bool = True):
        self.registry_file = Path(registry_file)
        # Take an advisory lock and fsync around each append where supported
        self.durable = durable

    def append_photo(
        self,
        basename: str,
        absolute_path: Union[str, Path],
        origin: Optional[PhotoOrigin] = None,
        size_bytes: Optional[int] = None,
        added_at: Optional[str] = None,
    ) -> PhotoRecord:
        """Append a `photo` record; `basename` may carry the extension or not."""
        photo_id = strip_image_ext(basename)
        abs_path = str(absolute_path)
        origin = origin or PhotoOrigin()
        # Remote id and source default to the logical id and stored path
        if not origin.photo_id or not origin.source_url:
            origin = PhotoOrigin(
                chat_id=origin.chat_id,
                photo_id=origin.photo_id or photo_id,
                source_url=origin.source_url or abs_path,
                user_id=origin.user_id,
                username=origin.username,
                first_name=origin.first_name,
                last_name=origin.last_name,
                submitted_at=origin.submitted_at,
            )
        record = PhotoRecord(
            photo_id=photo_id,
            added_at=added_at or now_iso(),
            origin=origin,
            storage=PhotoStorage(absolute_path=abs_path, size_bytes=size_bytes),
        )
        self._append(record)
        logger.debug("Appended photo record for %s", photo_id)
        return record

    def append_tombstone(self, photo_id: str, deleted_at: Optional[str] = None) -> TombstoneRecord:
        """Append a `tombstone` record for `photo_id`."""
        record = TombstoneRecord(photo_id=strip_image_ext(photo_id), deleted_at=deleted_at or now_iso())
        self._append(record)
        logger.debug("Appended tombstone for %s", record.photo_id)
        return record

    def _append(self, record: RegistryRecord) -> None:
        line = json.dumps(record.to_dict(), ensure_ascii=False) + "\n"
        ensure_dir(self.registry_file.parent)
        with self.registry_file.open("a", encoding="utf-8") as f:
            locked = self.durable and fcntl is not None
            if locked:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(line)
                f.flush()
                if self.durable:
                    os.fsync(f.fileno())
            finally:
                if locked:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
