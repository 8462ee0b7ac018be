#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Registry inspection and maintenance commands.
"""

import logging

from ..config import StoragePaths
from ..jsonio import success, error
from ..models.records import PhotoRecord
from ..registry.reader import RegistryReader
from ..registry.writer import RegistryWriter, strip_image_ext

logger = logging.getLogger(__name__)


def cmd_list_alive(paths: StoragePaths, as_json: bool = False) -> int:
    """List photos currently alive in the registry."""
    photos = sorted(RegistryReader(paths.registry_file).get_all_photos(), key=lambda r: r.added_at)

    if as_json:
        return success("alive", {
            "photos": photos,
            "total_count": len(photos),
        })

    if not photos:
        print("No photos in the registry.")
        return 0

    print(f"Alive photos ({len(photos)}):")
    print(f"{'Photo ID':<40} {'Added':<26} {'Submitted by':<20} {'Bytes':>10}")
    print("-" * 100)
    for p in photos:
        short_id = p.photo_id if len(p.photo_id) <= 37 else p.photo_id[:34] + "..."
        who = p.origin.username or "-"
        size = f"{p.storage.size_bytes:,}" if p.storage.size_bytes is not None else "-"
        print(f"{short_id:<40} {p.added_at:<26} {who:<20} {size:>10}")
    return 0


def cmd_show_photo(paths: StoragePaths, photo_id: str, as_json: bool = False) -> int:
    """Show a photo's full log history and whether it is alive."""
    photo_id = strip_image_ext(photo_id)
    reader = RegistryReader(paths.registry_file)
    history = reader.history(photo_id)
    alive = reader.get_by_photo_id(photo_id)

    if not history:
        if as_json:
            return error("show", f"Photo {photo_id} not found in the registry")
        print(f"Photo {photo_id} not found in the registry.")
        return 1

    if as_json:
        return success("show", {
            "photo_id": photo_id,
            "alive": alive is not None,
            "current": alive,
            "history": history,
        })

    print(f"Photo {photo_id}: {'alive' if alive else 'deleted'}")
    for r in history:
        if isinstance(r, PhotoRecord):
            print(f"  + {r.added_at}  photo  by {r.origin.username}  -> {r.storage.absolute_path}")
        else:
            print(f"  - {r.deleted_at}  tombstone")
    return 0


def cmd_tombstone(paths: StoragePaths, photo_id: str, as_json: bool = False) -> int:
    """Append a tombstone; the stored file, if any, is left alone."""
    record = RegistryWriter(paths.registry_file).append_tombstone(photo_id)
    logger.info("Tombstoned %s", record.photo_id)
    if as_json:
        return success("tombstone", record)
    print(f"Tombstoned {record.photo_id} at {record.deleted_at}")
    return 0
