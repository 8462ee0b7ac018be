#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Photo ingestion: turn submitted images into stored frame-sized files and
register them; remove photos on request.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Union

import requests

from ..config import DOWNLOAD_TIMEOUT_SECONDS
from ..events.bus import EventBus
from ..events.types import AddedPhoto, Event, RemovedPhoto
from ..models.records import PhotoOrigin, PhotoRecord
from ..registry.writer import RegistryWriter, strip_image_ext
from ..storage.images import ImageStorage
from ..storage.render import render_for_frame

logger = logging.getLogger(__name__)


def fetch_source(url: str, timeout: float = DOWNLOAD_TIMEOUT_SECONDS) -> bytes:
    """Download an http(s) URL, or read a local path / file:// URL."""
    if url.startswith(("http://", "https://")):
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        return resp.content
    if url.startswith("file://"):
        url = url[len("file://"):]
    return Path(url).expanduser().read_bytes()


class PhotoProcessor:
    """Handles `added_photo` and `removed_photo` events."""

    def __init__(self, storage: ImageStorage, writer: RegistryWriter,
                 fetch: Callable[[str], bytes] = fetch_source,
                 render: Callable[[bytes], bytes] = render_for_frame):
        self.storage = storage
        self.writer = writer
        self.fetch = fetch
        self.render = render

    def add_photo(self, photo_id: str, source: Union[str, bytes], origin: PhotoOrigin) -> PhotoRecord:
        """Render, store and register one photo. Raises on download, decode or I/O failure."""
        photo_id = strip_image_ext(photo_id)
        data = source if isinstance(source, bytes) else self.fetch(source)
        rendered = self.render(data)
        path = self.storage.save_image(photo_id, rendered)
        return self.writer.append_photo(
            basename=photo_id,
            absolute_path=path,
            origin=origin,
            size_bytes=path.stat().st_size,
        )

    def remove_photo(self, photo_id: str) -> None:
        existed = self.storage.delete_image(photo_id)
        self.writer.append_tombstone(photo_id)
        logger.info("Photo deleted & tombstoned: %s%s", photo_id, "" if existed else " (file was already gone)")

    def handle(self, event: Event) -> None:
        """Dispatch one bus event; failures are logged and the event is dropped."""
        if isinstance(event, AddedPhoto):
            self._on_added(event)
        elif isinstance(event, RemovedPhoto):
            self._on_removed(event)
        else:
            logger.debug("Ignoring %s event", event.TYPE)

    def _on_added(self, event: AddedPhoto) -> None:
        logger.info("Adding photo: %s", event.photo_id)
        origin = PhotoOrigin(
            chat_id=event.chat_id,
            photo_id=event.photo_id,
            source_url=event.photo_url,
            user_id=event.user_id,
            username=event.username,
            first_name=event.first_name,
            last_name=event.last_name,
            submitted_at=event.timestamp,
        )
        try:
            self.add_photo(event.photo_id, event.photo_url, origin)
        except (requests.RequestException, OSError, ValueError) as e:
            logger.error("Failed to add %s: %s", event.photo_id, e)
            return
        logger.info("Photo saved & registered: %s", event.photo_id)

    def _on_removed(self, event: RemovedPhoto) -> None:
        logger.info("Removing photo: %s", event.photo_id)
        try:
            self.remove_photo(event.photo_id)
        except OSError as e:
            logger.error("Failed to remove %s: %s", event.photo_id, e)

    def run(self, bus: EventBus, stop_event: threading.Event) -> None:
        logger.info("Starting photo processor...")
        for event in bus.subscribe(stop_event):
            self.handle(event)
        logger.info("Photo processor stopped.")


def ingest_local_file(processor: PhotoProcessor, path: Path, username: str = "",
                      photo_id: Optional[str] = None) -> PhotoRecord:
    """Register a local image under its file stem (or `photo_id`)."""
    origin = PhotoOrigin(
        photo_id=photo_id or path.stem,
        source_url=str(path.resolve()),
        username=username or PhotoOrigin().username,
    )
    return processor.add_photo(photo_id or path.stem, path.read_bytes(), origin)
