#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Long-running reconciliation service: once at boot, then daily at a fixed time.
"""

import logging
import math
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from ..config import DEFAULT_RECONCILE_AT
from .reconciler import Reconciler, ReconcileResult

logger = logging.getLogger(__name__)


def seconds_until(hour: int, minute: int, now: Optional[datetime] = None) -> float:
    """Seconds from `now` (local time) until the next `hour:minute`."""
    now = now or datetime.now()
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class ReconcilerService:
    """Drives a Reconciler on a daily timetable until stopped."""

    def __init__(self, reconciler: Reconciler, run_at: Tuple[int, int] = DEFAULT_RECONCILE_AT,
                 now: Callable[[], datetime] = datetime.now):
        self.reconciler = reconciler
        self.run_at = run_at
        self.now = now

    def run_once(self) -> Optional[ReconcileResult]:
        """Reconcile, logging I/O failures instead of letting them end the service."""
        try:
            return self.reconciler.reconcile()
        except OSError:
            logger.exception("Reconciliation failed")
            return None

    def run_forever(self, stop_event: threading.Event) -> None:
        self.run_once()
        while not stop_event.is_set():
            delay = seconds_until(*self.run_at, now=self.now())
            logger.info("Registry reconciler idle. Next run in ~%d min.", math.ceil(delay / 60))
            if stop_event.wait(delay):
                break
            self.run_once()
        logger.info("Registry reconciler stopped.")
