#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Display scheduler: decides when the frame rotates and what it shows.

Two triggers drive a rotation, a recurring timer (scheduled) and
`request_next` events (manual). Both go through `can_shuffle_now`, which
enforces the minimum interval and, for scheduled rotations only, quiet hours.

Everything the scheduler reads or mutates lives on a `SchedulerContext`.
Handlers and timer ticks are invoked one at a time by the scheduler loop, so
nothing here takes locks.
"""

import logging
import math
import random
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ..config import DEFAULT_HISTORY_COOLDOWN
from ..events.types import (
    ConfigResult, CurrentResult, DisplayPhoto, Event, NextResult, RequestCurrent, RequestNext,
    SetQuietHours, SetShuffle,
)
from ..models.records import PhotoOrigin, PhotoRecord
from ..models.scheduler import AppConfig, AppState, QuietHours
from ..registry.reader import RegistryReader
from ..storage.images import ImageStorage
from ..utils.time import parse_iso, to_iso
from .picker import HistoryRandomPicker
from .quiet_hours import parse_hhmm, time_until_window_end
from .store import ConfigStore, StateStore

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60_000


def local_now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


class ShuffleSource(str, Enum):
    SCHEDULED = "scheduled"
    MANUAL = "manual"


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    wait_ms: int
    min_gate_ms: int = 0
    quiet_hours_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowed": self.allowed,
            "waitMs": self.wait_ms,
            "minGateMs": self.min_gate_ms,
            "quietHoursMs": self.quiet_hours_ms,
        }


class DisplayStatus(str, Enum):
    DISPLAYED = "displayed"
    GATED = "gated"
    NO_CANDIDATES = "no_candidates"


@dataclass(frozen=True)
class DisplayOutcome:
    status: DisplayStatus
    wait_ms: int = 0
    photo_id: Optional[str] = None
    photo_path: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is DisplayStatus.DISPLAYED


@dataclass(frozen=True)
class CurrentPhoto:
    photo_id: Optional[str]
    photo_path: str
    meta: Optional[Dict[str, Any]]


class SchedulerContext:
    """Explicit scheduler state: config, runtime state and collaborators."""

    def __init__(self, config_store: ConfigStore, state_store: StateStore, reader: RegistryReader,
                 storage: ImageStorage, publish: Callable[[Event], None],
                 clock: Callable[[], datetime] = local_now,
                 cooldown: int = DEFAULT_HISTORY_COOLDOWN,
                 rng: Optional[random.Random] = None):
        self.config_store = config_store
        self.state_store = state_store
        self.reader = reader
        self.storage = storage
        self.publish = publish
        self.clock = clock
        self.picker: HistoryRandomPicker[str] = HistoryRandomPicker(storage.list_photo_ids, cooldown, rng)
        self.config: AppConfig = config_store.load()
        self.state: AppState = state_store.load_or_create()

    def now(self) -> datetime:
        return self.clock()

    def save_config(self, config: AppConfig) -> AppConfig:
        self.config = self.config_store.save(config)
        return self.config

    def save_state(self, state: AppState) -> AppState:
        self.state = self.state_store.save(state)
        return self.state


def display_meta(photo_id: str, record: Optional[PhotoRecord]) -> Dict[str, Any]:
    """Denormalized submitter fields for a photo; unknown submitter without a record."""
    origin = record.origin if record is not None else PhotoOrigin()
    return {
        "photoId": photo_id,
        "username": origin.username,
        "firstName": origin.first_name,
        "lastName": origin.last_name,
        "userId": origin.user_id,
        "chatId": origin.chat_id,
        "submittedAt": origin.submitted_at or None,
        "addedAt": record.added_at if record is not None else None,
        "sourceUrl": origin.source_url or None,
    }


class DisplayScheduler:
    """Gate, rotate, answer queries and keep the recurring timer armed."""

    def __init__(self, ctx: SchedulerContext, timer):
        self.ctx = ctx
        # Anything with arm(delay_seconds) and cancel()
        self.timer = timer
        self._handlers: Dict[type, Callable[[Any], None]] = {
            SetShuffle: self._on_set_shuffle,
            SetQuietHours: self._on_set_quiet_hours,
            RequestNext: self._on_request_next,
            RequestCurrent: self._on_request_current,
        }

    # -- gating -----------------------------------------------------------

    def can_shuffle_now(self, source: ShuffleSource) -> GateDecision:
        now = self.ctx.now()
        config = self.ctx.config

        last = parse_iso(self.ctx.state.last_display_at)
        min_gap_ms = int(config.min_shuffle_minutes * MS_PER_MINUTE)
        if last is None:
            min_gate_ms = 0
        else:
            since_last_ms = (now - last) / timedelta(milliseconds=1)
            min_gate_ms = max(0, int(min_gap_ms - since_last_ms))

        quiet_ms = 0
        if source is ShuffleSource.SCHEDULED and config.quiet_hours_enabled:
            quiet_ms = int(time_until_window_end(config.quiet_hours, now) / timedelta(milliseconds=1))

        wait_ms = max(min_gate_ms, quiet_ms)
        return GateDecision(allowed=wait_ms <= 0, wait_ms=wait_ms, min_gate_ms=min_gate_ms, quiet_hours_ms=quiet_ms)

    # -- rotation ---------------------------------------------------------

    def display_random_image(self, source: ShuffleSource) -> DisplayOutcome:
        decision = self.can_shuffle_now(source)
        if not decision.allowed:
            logger.info("Rotation (%s) gated for another %d ms", source.value, decision.wait_ms)
            return DisplayOutcome(DisplayStatus.GATED, wait_ms=decision.wait_ms)

        photo_id = self.ctx.picker.pick()
        if photo_id is None:
            logger.warning("No images available to display.")
            return DisplayOutcome(DisplayStatus.NO_CANDIDATES)

        record = self.ctx.reader.get_by_photo_id(photo_id)
        if record is None:
            logger.info("Photo %s has no registry entry, showing it with an unknown submitter", photo_id)
        photo_path = str(self.ctx.storage.full_path(photo_id))
        meta = display_meta(photo_id, record)

        logger.info("Picked random image (%s): %s", source.value, photo_path)
        self.ctx.publish(DisplayPhoto(photo_url=photo_path, photo_id=photo_id))
        self.ctx.save_state(AppState(
            last_display_at=to_iso(self.ctx.now()),
            current_photo_id=photo_id,
            current_photo_path=photo_path,
            current_meta=meta,
        ))
        return DisplayOutcome(DisplayStatus.DISPLAYED, photo_id=photo_id, photo_path=photo_path)

    # -- timer ------------------------------------------------------------

    def interval_seconds(self) -> float:
        return self.ctx.config.default_shuffle_minutes * 60

    def start(self) -> None:
        self.reschedule()

    def stop(self) -> None:
        self.timer.cancel()

    def reschedule(self) -> float:
        """Tear the recurring timer down and arm it again; returns the first delay."""
        self.timer.cancel()
        delay = self.interval_seconds()
        config = self.ctx.config
        if config.quiet_hours_enabled:
            remaining = time_until_window_end(config.quiet_hours, self.ctx.now()).total_seconds()
            if remaining > 0:
                logger.info("Quiet hours active, first rotation in %.0f s", remaining)
                delay = remaining
        self.timer.arm(delay)
        logger.info("Rotation timer armed: every %s min, next in %.0f s",
                    config.default_shuffle_minutes, delay)
        return delay

    def on_tick(self) -> DisplayOutcome:
        outcome = self.display_random_image(ShuffleSource.SCHEDULED)
        delay = self.interval_seconds()
        if outcome.status is DisplayStatus.GATED:
            delay = max(delay, outcome.wait_ms / 1000)
        self.timer.arm(delay)
        return outcome

    # -- configuration ----------------------------------------------------

    def set_shuffle(self, minutes: float) -> AppConfig:
        """Clamp to the minimum, persist, and reschedule only on an effective change."""
        minutes = float(minutes)
        if not math.isfinite(minutes):
            raise ValueError("minutes must be a finite number")
        previous = self.ctx.config
        effective = float(max(minutes, previous.min_shuffle_minutes))
        if effective.is_integer():
            effective = int(effective)
        updated = self.ctx.save_config(replace(previous, default_shuffle_minutes=effective))
        if updated.default_shuffle_minutes != previous.default_shuffle_minutes:
            logger.info("Shuffle interval changed: %s -> %s min",
                        previous.default_shuffle_minutes, updated.default_shuffle_minutes)
            self.reschedule()
        return updated

    def set_quiet_hours(self, enabled: bool, start: str, end: str) -> AppConfig:
        """Validate and persist the window; reschedule when it changed. ValueError on bad times."""
        parse_hhmm(start)
        parse_hhmm(end)
        previous = self.ctx.config
        window = QuietHours(enabled=bool(enabled), start=start.strip(), end=end.strip())
        updated = self.ctx.save_config(replace(previous, quiet_hours=window))
        if updated.quiet_hours != previous.quiet_hours:
            logger.info("Quiet hours changed: %s", window)
            self.reschedule()
        return updated

    # -- queries ----------------------------------------------------------

    def current(self) -> Optional[CurrentPhoto]:
        state = self.ctx.state
        path = state.current_photo_path
        if not path or not Path(path).is_file():
            return None
        return CurrentPhoto(photo_id=state.current_photo_id, photo_path=path, meta=state.current_meta)

    # -- events -----------------------------------------------------------

    def handle(self, event: Event) -> None:
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.debug("Ignoring %s event", event.TYPE)
            return
        handler(event)

    def _on_set_shuffle(self, event: SetShuffle) -> None:
        logger.info("set_shuffle %s requested by %s", event.minutes, event.requested_by or "-")
        try:
            config = self.set_shuffle(event.minutes)
        except (TypeError, ValueError) as e:
            logger.warning("Rejected set_shuffle %r: %s", event.minutes, e)
            return
        self._reply_config(event.chat_id, config)

    def _on_set_quiet_hours(self, event: SetQuietHours) -> None:
        logger.info("set_quiet_hours %s-%s enabled=%s requested by %s",
                    event.start, event.end, event.enabled, event.requested_by or "-")
        try:
            config = self.set_quiet_hours(event.enabled, event.start, event.end)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Rejected set_quiet_hours: %s", e)
            return
        self._reply_config(event.chat_id, config)

    def _on_request_next(self, event: RequestNext) -> None:
        logger.info("request_next from %s in chat %s", event.requested_by or "-", event.chat_id)
        outcome = self.display_random_image(ShuffleSource.MANUAL)
        if outcome.status is DisplayStatus.GATED:
            reply = NextResult(chat_id=event.chat_id, ok=False, ms_remaining=outcome.wait_ms)
        elif outcome.status is DisplayStatus.NO_CANDIDATES:
            reply = NextResult(chat_id=event.chat_id, ok=False, no_images=True)
        else:
            reply = NextResult(chat_id=event.chat_id, ok=True)
        self.ctx.publish(reply)

    def _on_request_current(self, event: RequestCurrent) -> None:
        current = self.current()
        if current is None:
            self.ctx.publish(CurrentResult(chat_id=event.chat_id, ok=False, no_images=True))
            return
        self.ctx.publish(CurrentResult(
            chat_id=event.chat_id, ok=True, photo_url=current.photo_path, meta=current.meta,
        ))

    def _reply_config(self, chat_id: Optional[int], config: AppConfig) -> None:
        if chat_id is None:
            return
        self.ctx.publish(ConfigResult(
            chat_id=chat_id,
            minutes=config.default_shuffle_minutes,
            min_minutes=config.min_shuffle_minutes,
            quiet_hours=config.quiet_hours.to_dict() if config.quiet_hours else None,
        ))
