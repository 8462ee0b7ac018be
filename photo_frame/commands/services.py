#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Long-running services: display scheduler, reconciler and ingestion processor.

Each service owns a spool-bus inbox (where it consumes events) and runs until
SIGINT/SIGTERM sets the shared stop event.
"""

import logging
import signal
import threading
from typing import Optional, Tuple

from ..config import DEFAULT_HISTORY_COOLDOWN, DEFAULT_MISSING_GRACE_SECONDS, DEFAULT_RECONCILE_AT, StoragePaths
from ..events.bus import SpoolBus
from ..ingest.processor import PhotoProcessor
from ..reconcile.service import ReconcilerService
from ..registry.writer import RegistryWriter
from ..scheduling.loop import SchedulerLoop
from ..scheduling.scheduler import DisplayScheduler
from ..storage.images import ImageStorage
from .reconcile import build_reconciler
from .scheduler import build_context

logger = logging.getLogger(__name__)

SCHEDULER_INBOX = "scheduler"
PROCESSOR_INBOX = "processor"


def install_stop_handlers(stop_event: Optional[threading.Event] = None) -> threading.Event:
    """Set `stop_event` on SIGINT/SIGTERM. Only valid on the main thread."""
    stop_event = stop_event or threading.Event()

    def _stop(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)
    return stop_event


def run_scheduler(paths: StoragePaths, stop_event: threading.Event,
                  cooldown: int = DEFAULT_HISTORY_COOLDOWN) -> int:
    bus = SpoolBus(paths.bus_dir, inbox=SCHEDULER_INBOX)
    loop = SchedulerLoop(bus)
    ctx = build_context(paths, publish=bus.publish, cooldown=cooldown)
    scheduler = DisplayScheduler(ctx, loop.timer)
    logger.info("Display scheduler starting (data root %s)", paths.root)
    loop.run(scheduler, stop_event)
    return 0


def run_reconciler(paths: StoragePaths, stop_event: threading.Event,
                   run_at: Tuple[int, int] = DEFAULT_RECONCILE_AT,
                   grace_seconds: float = DEFAULT_MISSING_GRACE_SECONDS) -> int:
    service = ReconcilerService(build_reconciler(paths, grace_seconds), run_at=run_at)
    logger.info("Registry reconciler starting, daily at %02d:%02d", *run_at)
    service.run_forever(stop_event)
    return 0


def run_processor(paths: StoragePaths, stop_event: threading.Event) -> int:
    bus = SpoolBus(paths.bus_dir, inbox=PROCESSOR_INBOX)
    processor = PhotoProcessor(ImageStorage(paths.photos_dir), RegistryWriter(paths.registry_file))
    processor.run(bus, stop_event)
    return 0
