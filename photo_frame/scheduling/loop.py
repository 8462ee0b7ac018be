#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Single-consumer loop for the display scheduler.

Bus events and timer ticks land in one inbox and are handled one at a time
on the loop's thread. A bus event is acknowledged to the transport only
after its handler returned.
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Optional, Union

from ..events.bus import EventBus
from ..events.types import Event
from .scheduler import DisplayScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Tick:
    generation: int


@dataclass
class _Delivery:
    event: Event
    done: threading.Event = field(default_factory=threading.Event)


class TickTimer:
    """One-shot timer that posts a tick into the loop's inbox.

    Re-arming bumps a generation counter, so a tick from a timer that fired
    while being cancelled is recognised as stale and dropped.
    """

    def __init__(self, inbox: "queue.Queue[Union[_Tick, _Delivery]]"):
        self._inbox = inbox
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    def arm(self, delay_seconds: float) -> None:
        self.cancel()
        self._generation += 1
        timer = threading.Timer(max(0.0, delay_seconds), self._inbox.put, args=(_Tick(self._generation),))
        timer.daemon = True
        timer.start()
        self._timer = timer

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def is_current(self, tick: _Tick) -> bool:
        return tick.generation == self._generation


class SchedulerLoop:
    """Feeds bus events and timer ticks to a DisplayScheduler, serially."""

    def __init__(self, bus: EventBus, poll_seconds: float = 0.5):
        self.bus = bus
        self.poll_seconds = poll_seconds
        self.inbox: "queue.Queue[Union[_Tick, _Delivery]]" = queue.Queue()
        self.timer = TickTimer(self.inbox)

    def run(self, scheduler: DisplayScheduler, stop_event: threading.Event) -> None:
        forwarder = threading.Thread(target=self._forward, args=(stop_event,), name="bus-forwarder", daemon=True)
        forwarder.start()
        scheduler.start()
        try:
            while not stop_event.is_set():
                try:
                    item = self.inbox.get(timeout=self.poll_seconds)
                except queue.Empty:
                    continue
                self._dispatch(scheduler, item)
        finally:
            scheduler.stop()
            logger.info("Scheduler loop stopped.")

    def process_pending(self, scheduler: DisplayScheduler) -> int:
        """Handle everything already in the inbox on the calling thread."""
        handled = 0
        while True:
            try:
                item = self.inbox.get_nowait()
            except queue.Empty:
                return handled
            self._dispatch(scheduler, item)
            handled += 1

    def submit(self, event: Event) -> _Delivery:
        delivery = _Delivery(event)
        self.inbox.put(delivery)
        return delivery

    def _forward(self, stop_event: threading.Event) -> None:
        for event in self.bus.subscribe(stop_event):
            delivery = self.submit(event)
            # Wait for the handler before letting the transport acknowledge
            while not delivery.done.wait(self.poll_seconds):
                if stop_event.is_set():
                    return

    def _dispatch(self, scheduler: DisplayScheduler, item: Union[_Tick, _Delivery]) -> None:
        try:
            if isinstance(item, _Tick):
                if self.timer.is_current(item):
                    scheduler.on_tick()
                else:
                    logger.debug("Dropping stale tick %d", item.generation)
            else:
                scheduler.handle(item.event)
        except Exception:
            logger.exception("Failed while handling %s", item)
            if isinstance(item, _Tick) and self.timer.is_current(item):
                # Keep rotating even if this tick failed
                scheduler.timer.arm(scheduler.interval_seconds())
        finally:
            if isinstance(item, _Delivery):
                item.done.set()
