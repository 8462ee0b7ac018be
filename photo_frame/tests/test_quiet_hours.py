#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for quiet-hours window arithmetic.
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from photo_frame.models.scheduler import QuietHours
from photo_frame.scheduling.quiet_hours import (
    is_minute_in_window, is_window_active, minutes_until_window_end, parse_hhmm, time_until_window_end,
)


def _at(hour, minute=0, second=0):
    return datetime(2024, 6, 1, hour, minute, second)


class TestParseHHMM:

    @pytest.mark.parametrize("text,expected", [("00:00", 0), ("7:05", 425), ("23:59", 1439), (" 06:00 ", 360)])
    def test_valid(self, text, expected):
        assert parse_hhmm(text) == expected

    @pytest.mark.parametrize("text", ["24:00", "12:60", "noon", "", "1200", None])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_hhmm(text)


class TestWindow:

    def test_wrapping_window_active_after_midnight(self):
        window = QuietHours(enabled=True, start="23:00", end="06:00")
        assert is_window_active(window, _at(2))
        assert minutes_until_window_end(window, _at(2)) == 240

    def test_wrapping_window_active_before_midnight(self):
        window = QuietHours(enabled=True, start="23:00", end="06:00")
        assert minutes_until_window_end(window, _at(23, 30)) == 390

    def test_plain_window_inactive_outside(self):
        window = QuietHours(enabled=True, start="09:00", end="17:00")
        assert not is_window_active(window, _at(20))
        assert minutes_until_window_end(window, _at(20)) == 0

    def test_end_is_exclusive(self):
        window = QuietHours(enabled=True, start="09:00", end="17:00")
        assert is_window_active(window, _at(9))
        assert not is_window_active(window, _at(17))

    def test_empty_window(self):
        assert not is_minute_in_window(600, 600, 600)
        window = QuietHours(enabled=True, start="10:00", end="10:00")
        assert not is_window_active(window, _at(10))

    def test_disabled_or_missing(self):
        assert not is_window_active(QuietHours(enabled=False, start="00:00", end="23:59"), _at(12))
        assert not is_window_active(None, _at(12))

    def test_exact_remaining_time(self):
        window = QuietHours(enabled=True, start="23:00", end="06:00")
        assert time_until_window_end(window, _at(5, 59, 30)) == timedelta(seconds=30)
        assert time_until_window_end(window, _at(12)) == timedelta(0)
