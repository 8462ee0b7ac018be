#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Registry state reader: folds the append-only log into the alive view.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ..models.records import PhotoRecord, RegistryRecord, TombstoneRecord, record_from_dict

logger = logging.getLogger(__name__)


def iter_records(registry_file: Path) -> Iterator[RegistryRecord]:
    """Yield parsed records in log order, skipping lines that do not parse."""
    if not registry_file.exists():
        return
    with registry_file.open("r", encoding="utf-8", errors="replace") as f:
        for lineno, line in enumerate(f, start=1):
            text = line.strip()
            if not text:
                continue
            try:
                obj = json.loads(text)
            except ValueError:
                logger.warning("Skipping malformed registry line %d in %s", lineno, registry_file)
                continue
            record = record_from_dict(obj)
            if record is None:
                logger.warning("Skipping unrecognized registry record on line %d in %s", lineno, registry_file)
                continue
            yield record


def _path_key(path: str) -> str:
    return os.path.normcase(os.path.abspath(path))


@dataclass
class AliveIndex:
    """Photos whose last record in the log is a photo record."""
    by_id: Dict[str, PhotoRecord] = field(default_factory=dict)
    by_path: Dict[str, PhotoRecord] = field(default_factory=dict)
    photos: List[PhotoRecord] = field(default_factory=list)

    def __contains__(self, photo_id: object) -> bool:
        return photo_id in self.by_id

    def __len__(self) -> int:
        return len(self.by_id)

    def get(self, photo_id: str) -> Optional[PhotoRecord]:
        return self.by_id.get(photo_id)

    def get_by_path(self, absolute_path: Union[str, Path]) -> Optional[PhotoRecord]:
        return self.by_path.get(_path_key(str(absolute_path)))


def fold_records(records: Iterable[RegistryRecord]) -> AliveIndex:
    """Apply last-record-wins per photo id."""
    buckets: Dict[str, List[RegistryRecord]] = {}
    for record in records:
        buckets.setdefault(record.photo_id, []).append(record)

    index = AliveIndex()
    for photo_id, bucket in buckets.items():
        for record in reversed(bucket):
            if isinstance(record, TombstoneRecord):
                break
            if isinstance(record, PhotoRecord):
                index.by_id[photo_id] = record
                if record.storage.absolute_path:
                    index.by_path[_path_key(record.storage.absolute_path)] = record
                index.photos.append(record)
                break
    return index


class RegistryReader:
    """Cached view of the registry, refreshed whenever the log file changes."""

    def __init__(self, registry_file: Union[str, Path]):
        self.registry_file = Path(registry_file)
        self._signature: Optional[Tuple[int, int]] = None
        self._index = AliveIndex()
        self._loaded = False

    def _file_signature(self) -> Optional[Tuple[int, int]]:
        try:
            st = self.registry_file.stat()
        except FileNotFoundError:
            return None
        return st.st_mtime_ns, st.st_size

    def _reload_if_needed(self) -> None:
        signature = self._file_signature()
        if self._loaded and signature == self._signature:
            return
        self._index = fold_records(iter_records(self.registry_file))
        self._signature = signature
        self._loaded = True
        logger.debug("Registry folded: %d alive photos", len(self._index))

    def get_alive_index(self) -> AliveIndex:
        self._reload_if_needed()
        return self._index

    def get_by_photo_id(self, photo_id: str) -> Optional[PhotoRecord]:
        return self.get_alive_index().get(photo_id)

    def get_by_path(self, absolute_path: Union[str, Path]) -> Optional[PhotoRecord]:
        return self.get_alive_index().get_by_path(absolute_path)

    def get_all_photos(self) -> List[PhotoRecord]:
        """All alive photos (cached until the file changes)."""
        return self.get_alive_index().photos

    def history(self, photo_id: str) -> List[RegistryRecord]:
        """Every record for `photo_id`, in log order. Not cached."""
        return [r for r in iter_records(self.registry_file) if r.photo_id == photo_id]
