"""Utility functions for the photo frame engine."""

from .time import utc_now, to_iso, now_iso, parse_iso, from_timestamp
from .path import ensure_dir, atomic_write_bytes, atomic_write_json, read_json_object

__all__ = [
    'utc_now', 'to_iso', 'now_iso', 'parse_iso', 'from_timestamp',
    'ensure_dir', 'atomic_write_bytes', 'atomic_write_json', 'read_json_object',
]
