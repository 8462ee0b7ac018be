#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Quiet-hours window arithmetic.

A window `[start, end)` is expressed in local time of day. When `start > end`
it wraps through midnight; `start == end` is an empty window.
"""

import re
from datetime import datetime, timedelta
from typing import Optional

from ..models.scheduler import QuietHours

MINUTES_PER_DAY = 24 * 60
_HHMM = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(value: str) -> int:
    """Minutes after midnight for an `HH:MM` string; ValueError otherwise."""
    match = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time of day (expected HH:MM): {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def is_minute_in_window(minute_of_day: int, start: int, end: int) -> bool:
    if start == end:
        return False
    if start < end:
        return start <= minute_of_day < end
    return minute_of_day >= start or minute_of_day < end


def is_window_active(window: Optional[QuietHours], now: datetime) -> bool:
    if window is None or not window.enabled:
        return False
    start, end = parse_hhmm(window.start), parse_hhmm(window.end)
    return is_minute_in_window(now.hour * 60 + now.minute, start, end)


def minutes_until_window_end(window: Optional[QuietHours], now: datetime) -> int:
    """Whole minutes left in the window at `now`, or 0 when it is not active."""
    if not is_window_active(window, now):
        return 0
    end = parse_hhmm(window.end)
    return (end - (now.hour * 60 + now.minute)) % MINUTES_PER_DAY


def time_until_window_end(window: Optional[QuietHours], now: datetime) -> timedelta:
    """Exact time left in the window at `now`, or zero when it is not active."""
    if not is_window_active(window, now):
        return timedelta(0)
    end = parse_hhmm(window.end)
    end_at = now.replace(hour=end // 60, minute=end % 60, second=0, microsecond=0)
    if end_at <= now:
        end_at += timedelta(days=1)
    return end_at - now
