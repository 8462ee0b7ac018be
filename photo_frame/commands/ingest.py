#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Bulk ingest of local image files into the photo store and registry.
"""

import logging
from pathlib import Path
from typing import Iterable, List

from tqdm import tqdm

from ..config import SOURCE_IMAGE_EXT, StoragePaths
from ..ingest.processor import PhotoProcessor, ingest_local_file
from ..jsonio import success, error
from ..registry.writer import RegistryWriter
from ..storage.images import ImageStorage

logger = logging.getLogger(__name__)


def collect_sources(sources: Iterable[Path]) -> List[Path]:
    """Expand directories (recursively) into their image files; keep order, drop duplicates."""
    found: List[Path] = []
    for src in sources:
        src = Path(src).expanduser()
        if src.is_dir():
            found.extend(sorted(
                p for p in src.rglob("*")
                if p.is_file() and p.suffix.lower() in SOURCE_IMAGE_EXT and not p.name.startswith(".")
            ))
        elif src.is_file():
            found.append(src)
        else:
            logger.warning("Skipping %s: no such file or directory", src)
    return list(dict.fromkeys(p.resolve() for p in found))


def cmd_ingest(paths: StoragePaths, sources: List[Path], username: str = "", as_json: bool = False) -> int:
    """
    Render and register local images, one registry record per file.

    Each file is stored under its stem, so re-ingesting a file replaces the
    stored photo and appends a fresh record for it.

    Returns:
        0 when every file was ingested, 1 otherwise
    """
    files = collect_sources(sources)
    if not files:
        if as_json:
            return error("ingest", "No image files found")
        print("No image files found.")
        return 1

    processor = PhotoProcessor(ImageStorage(paths.photos_dir), RegistryWriter(paths.registry_file))
    added: List[str] = []
    failed: List[dict] = []

    for path in tqdm(files, desc="Ingesting", unit="photo", disable=as_json):
        try:
            record = ingest_local_file(processor, path, username=username)
        except (OSError, ValueError) as e:
            logger.error("Failed to ingest %s: %s", path, e)
            failed.append({"path": str(path), "error": str(e)})
            continue
        added.append(record.photo_id)

    code = 0 if not failed else 1
    if as_json:
        return success("ingest", {"added": added, "failed": failed}, code=code)

    print(f"Ingested {len(added)} of {len(files)} file(s).")
    for item in failed:
        print(f"  FAILED {item['path']}: {item['error']}")
    return code
