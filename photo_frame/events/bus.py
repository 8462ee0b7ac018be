#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Publish/subscribe transports for bus events.

`MemoryBus` keeps everything in one process (tests, embedded use).
`SpoolBus` lets separate processes talk through a shared directory: every
subscriber owns an inbox directory, `publish` drops one JSON file into each
inbox, and a subscriber deletes a file only after its handler returned, so
delivery is at-least-once.
"""

import logging
import os
import queue
import threading
import time
import uuid
from pathlib import Path
from typing import Iterator, List, Optional, Union

from ..config import BUS_POLL_SECONDS
from ..utils.path import atomic_write_bytes, ensure_dir
from .types import Event, EventDecodeError, parse_event, serialize_event

logger = logging.getLogger(__name__)

INBOXES_DIRNAME = "inboxes"
DEAD_LETTER_DIRNAME = "dead"


class EventBus:
    """Base transport interface."""

    def publish(self, event: Event) -> None:
        raise NotImplementedError

    def subscribe(self, stop_event: threading.Event) -> Iterator[Event]:
        """Yield events until `stop_event` is set.

        An event counts as delivered once the consumer asks for the next one.
        """
        raise NotImplementedError


class MemoryBus(EventBus):
    """In-process bus backed by a queue; every subscriber shares one stream."""

    def __init__(self, poll_seconds: float = BUS_POLL_SECONDS):
        self.poll_seconds = poll_seconds
        self.published: List[Event] = []
        self._queue: "queue.Queue[Event]" = queue.Queue()

    def publish(self, event: Event) -> None:
        self.published.append(event)
        self._queue.put(event)

    def subscribe(self, stop_event: threading.Event) -> Iterator[Event]:
        while not stop_event.is_set():
            try:
                event = self._queue.get(timeout=self.poll_seconds)
            except queue.Empty:
                continue
            yield event

    def drain(self) -> List[Event]:
        """Take everything queued so far without blocking."""
        out: List[Event] = []
        while True:
            try:
                out.append(self._queue.get_nowait())
            except queue.Empty:
                return out


class SpoolBus(EventBus):
    """Directory-backed bus shared between processes."""

    def __init__(self, root: Union[str, Path], inbox: Optional[str] = None,
                 poll_seconds: float = BUS_POLL_SECONDS):
        self.root = Path(root)
        self.poll_seconds = poll_seconds
        self.inbox_name = inbox
        ensure_dir(self.inboxes_dir)
        if inbox:
            # Registering the inbox up front means events published from now on reach us
            ensure_dir(self.inbox_dir)

    @property
    def inboxes_dir(self) -> Path:
        return self.root / INBOXES_DIRNAME

    @property
    def inbox_dir(self) -> Path:
        if not self.inbox_name:
            raise ValueError("This bus was opened for publishing only")
        return self.inboxes_dir / self.inbox_name

    @property
    def dead_letter_dir(self) -> Path:
        return self.root / DEAD_LETTER_DIRNAME

    def publish(self, event: Event) -> None:
        payload = serialize_event(event).encode("utf-8")
        # time_ns prefix keeps files in publish order when listed
        name = f"{_monotonic_name()}.json"
        inboxes = [p for p in self.inboxes_dir.iterdir() if p.is_dir()]
        if not inboxes:
            logger.warning("No subscribers registered under %s; dropping %s", self.inboxes_dir, event.TYPE)
            return
        for inbox in inboxes:
            atomic_write_bytes(inbox / name, payload)
        logger.debug("Published %s to %d inbox(es)", event.TYPE, len(inboxes))

    def pending(self) -> List[Path]:
        return sorted(p for p in self.inbox_dir.glob("*.json") if not p.name.startswith("."))

    def subscribe(self, stop_event: threading.Event) -> Iterator[Event]:
        while not stop_event.is_set():
            files = self.pending()
            if not files:
                stop_event.wait(self.poll_seconds)
                continue
            for path in files:
                if stop_event.is_set():
                    return
                event = self._read(path)
                if event is None:
                    continue
                yield event
                path.unlink(missing_ok=True)

    def _read(self, path: Path) -> Optional[Event]:
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        try:
            return parse_event(raw)
        except EventDecodeError as e:
            logger.warning("Moving undecodable event %s to dead letters: %s", path.name, e)
            ensure_dir(self.dead_letter_dir)
            os.replace(path, self.dead_letter_dir / path.name)
            return None


_counter_lock = threading.Lock()
_last_ns = 0


def _monotonic_name() -> str:
    """Sortable, unique file stem: nanosecond clock (strictly increasing) + random suffix."""
    global _last_ns
    with _counter_lock:
        now = max(time.time_ns(), _last_ns + 1)
        _last_ns = now
    return f"{now:020d}-{uuid.uuid4().hex[:8]}"
