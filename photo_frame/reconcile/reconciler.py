#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Registry reconciliation: the filesystem is ground truth.

Alive ids whose file is gone get a tombstone; files without an alive record
get a synthetic photo record with unknown provenance.
"""

import logging
import threading
import time
from dataclasses import dataclass, asdict
from typing import Callable, Dict

from ..config import DEFAULT_MISSING_GRACE_SECONDS
from ..models.records import PhotoOrigin
from ..registry.reader import RegistryReader
from ..registry.writer import RegistryWriter, strip_image_ext
from ..storage.images import ImageStorage
from ..utils.time import from_timestamp, to_iso

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    added: int = 0
    tombstoned: int = 0
    skipped: bool = False  # another run was already in progress

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


class Reconciler:
    """Diffs the photo store against the alive index and appends corrections."""

    def __init__(self, writer: RegistryWriter, reader: RegistryReader, storage: ImageStorage,
                 missing_grace_seconds: float = DEFAULT_MISSING_GRACE_SECONDS,
                 clock: Callable[[], float] = time.time):
        self.writer = writer
        self.reader = reader
        self.storage = storage
        self.missing_grace_seconds = missing_grace_seconds
        self.clock = clock
        self._running = threading.Lock()
        # photo id -> first time it was seen alive in the registry but missing on disk
        self._missing_since: Dict[str, float] = {}

    def reconcile(self) -> ReconcileResult:
        """Run once; a trigger that arrives mid-run is skipped, not queued."""
        if not self._running.acquire(blocking=False):
            logger.debug("Reconciliation already in progress, skipping trigger")
            return ReconcileResult(skipped=True)
        try:
            return self._reconcile()
        finally:
            self._running.release()

    def _reconcile(self) -> ReconcileResult:
        result = ReconcileResult()
        now = self.clock()
        alive = self.reader.get_alive_index()
        files = self.storage.list_images()
        physical: Dict[str, str] = {strip_image_ext(name): name for name in files}

        # 1) registry says alive, disk says gone
        for photo_id in list(alive.by_id):
            if photo_id in physical:
                self._missing_since.pop(photo_id, None)
                continue
            if not self._grace_elapsed(photo_id, now):
                logger.info("Photo %s missing on disk, waiting for grace period", photo_id)
                continue
            self.writer.append_tombstone(photo_id)
            self._missing_since.pop(photo_id, None)
            result.tombstoned += 1

        # Forget ids that are no longer alive at all
        for photo_id in list(self._missing_since):
            if photo_id not in alive.by_id:
                del self._missing_since[photo_id]

        # 2) disk has a file the registry does not know about
        for photo_id, name in physical.items():
            if photo_id in alive.by_id:
                continue
            path = self.storage.full_path(name)
            try:
                st = path.stat()
            except FileNotFoundError:
                # Removed between listing and stat; the next run settles it
                continue
            if self.missing_grace_seconds > 0 and now - st.st_mtime < self.missing_grace_seconds:
                logger.info("File %s is too recent, leaving it for the next run", name)
                continue
            mtime_iso = to_iso(from_timestamp(st.st_mtime))
            self.writer.append_photo(
                basename=photo_id,
                absolute_path=path,
                origin=PhotoOrigin.unknown(photo_id=photo_id, source_url=str(path), submitted_at=mtime_iso),
                size_bytes=st.st_size,
                added_at=mtime_iso,
            )
            result.added += 1

        logger.info("Reconcile done. Added=%d, Tombstoned=%d", result.added, result.tombstoned)
        return result

    def _grace_elapsed(self, photo_id: str, now: float) -> bool:
        if self.missing_grace_seconds <= 0:
            return True
        first_seen = self._missing_since.setdefault(photo_id, now)
        return now - first_seen >= self.missing_grace_seconds

