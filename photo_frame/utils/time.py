#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Time utility functions for the photo frame engine.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision and a 'Z' suffix."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def now_iso() -> str:
    """Return current UTC time in the registry timestamp format."""
    return to_iso(utc_now())


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp (with or without 'Z'); None when unparseable."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def from_timestamp(seconds: float) -> datetime:
    """Convert a POSIX timestamp (e.g. a file mtime) to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)
