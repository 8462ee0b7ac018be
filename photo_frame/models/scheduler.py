#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Persisted scheduler configuration and runtime state.
"""

import math
from dataclasses import dataclass, asdict, replace
from typing import Any, Dict, Optional

from ..config import DEFAULT_MIN_SHUFFLE_MINUTES, DEFAULT_SHUFFLE_MINUTES


def _positive_number(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number <= 0:
        return default
    return int(number) if number.is_integer() else number


@dataclass(frozen=True)
class QuietHours:
    """Time-of-day window, `HH:MM` local time, during which scheduled rotations pause."""
    enabled: bool
    start: str
    end: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["QuietHours"]:
        start, end = data.get("start", data.get("startHHMM")), data.get("end", data.get("endHHMM"))
        if not isinstance(start, str) or not isinstance(end, str):
            return None
        return cls(enabled=bool(data.get("enabled", False)), start=start, end=end)


@dataclass(frozen=True)
class AppConfig:
    """Rotation settings. `default_shuffle_minutes` never drops below the minimum."""
    min_shuffle_minutes: float = DEFAULT_MIN_SHUFFLE_MINUTES
    default_shuffle_minutes: float = DEFAULT_SHUFFLE_MINUTES
    quiet_hours: Optional[QuietHours] = None

    def normalized(self) -> "AppConfig":
        """Return a copy with the interval clamped to the minimum."""
        if self.default_shuffle_minutes < self.min_shuffle_minutes:
            return replace(self, default_shuffle_minutes=self.min_shuffle_minutes)
        return self

    @property
    def quiet_hours_enabled(self) -> bool:
        return self.quiet_hours is not None and self.quiet_hours.enabled

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "minShuffleMinutes": self.min_shuffle_minutes,
            "defaultShuffleMinutes": self.default_shuffle_minutes,
        }
        if self.quiet_hours is not None:
            out["quietHours"] = self.quiet_hours.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Build from a decoded config file, accepting the older snake_case keys."""
        min_raw = data.get("minShuffleMinutes", data.get("min_shuffle_time"))
        default_raw = data.get("defaultShuffleMinutes", data.get("default_shuffle_time"))
        quiet_raw = data.get("quietHours")
        return cls(
            min_shuffle_minutes=_positive_number(min_raw, DEFAULT_MIN_SHUFFLE_MINUTES),
            default_shuffle_minutes=_positive_number(default_raw, DEFAULT_SHUFFLE_MINUTES),
            quiet_hours=QuietHours.from_dict(quiet_raw) if isinstance(quiet_raw, dict) else None,
        ).normalized()


@dataclass(frozen=True)
class AppState:
    """What is on the frame right now and when it was put there."""
    last_display_at: Optional[str] = None
    current_photo_id: Optional[str] = None
    current_photo_path: Optional[str] = None
    current_meta: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.last_display_at is not None:
            out["lastDisplayAt"] = self.last_display_at
        if self.current_photo_id is not None:
            out["currentPhotoId"] = self.current_photo_id
        if self.current_photo_path is not None:
            out["currentPhotoPath"] = self.current_photo_path
        if self.current_meta is not None:
            out["currentMeta"] = self.current_meta
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppState":
        def _opt_str(key: str) -> Optional[str]:
            value = data.get(key)
            return value if isinstance(value, str) else None

        meta = data.get("currentMeta")
        return cls(
            last_display_at=_opt_str("lastDisplayAt"),
            current_photo_id=_opt_str("currentPhotoId"),
            current_photo_path=_opt_str("currentPhotoPath"),
            current_meta=meta if isinstance(meta, dict) else None,
        )
