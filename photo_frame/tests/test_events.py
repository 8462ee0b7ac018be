#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for bus event encoding and decoding.
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from photo_frame.events.types import (
    AddedPhoto, ConfigResult, CurrentResult, EVENT_TYPES, EventDecodeError, NextResult, RemovedPhoto,
    RequestNext, SetShuffle, event_from_dict, event_to_dict, parse_event, serialize_event,
)


class TestEncoding:

    def test_envelope(self):
        message = event_to_dict(RemovedPhoto(photo_id="p1"))
        assert message["type"] == "removed_photo"
        assert message["data"] == {"photoId": "p1"}
        assert message["timestamp"].endswith("Z")

    def test_camel_case_and_optional_fields_omitted(self):
        data = NextResult(chat_id=4, ok=False, ms_remaining=1200).data()
        assert data == {"chatId": 4, "ok": False, "msRemaining": 1200}

    def test_added_photo_payload(self):
        event = AddedPhoto(photo_id="abc", photo_url="http://x/y.jpg", chat_id=1, user_id=2,
                           username="alice", first_name="Alice", last_name="L", timestamp="t")
        assert event.data() == {
            "photoId": "abc", "photoUrl": "http://x/y.jpg", "chatId": 1, "userId": 2,
            "username": "alice", "firstName": "Alice", "lastName": "L", "timestamp": "t",
        }

    def test_every_kind_registered(self):
        assert set(EVENT_TYPES) == {
            "added_photo", "removed_photo", "set_shuffle", "set_quiet_hours", "request_next",
            "request_current", "display_photo", "next_result", "current_result", "config_result",
        }


class TestDecoding:

    def test_parse_serialized(self):
        event = CurrentResult(chat_id=3, ok=True, photo_url="/x.jpg", meta={"username": "u"})
        assert parse_event(serialize_event(event)) == event

    def test_missing_optionals_default(self):
        event = event_from_dict({"type": "set_shuffle", "data": {"minutes": 10}})
        assert event == SetShuffle(minutes=10)

    def test_unknown_fields_ignored(self):
        event = event_from_dict({"type": "request_next", "data": {"chatId": 1, "extra": True}})
        assert event == RequestNext(chat_id=1)

    def test_bytes_accepted(self):
        raw = json.dumps({"type": "config_result", "data": {"chatId": 1, "minutes": 5, "minMinutes": 1}})
        assert parse_event(raw.encode("utf-8")) == ConfigResult(chat_id=1, minutes=5, min_minutes=1)

    @pytest.mark.parametrize("message", [
        [],
        {"type": "nope", "data": {}},
        {"data": {"photoId": "x"}},
        {"type": "removed_photo"},
        {"type": "removed_photo", "data": {}},
    ])
    def test_rejects_malformed(self, message):
        with pytest.raises(EventDecodeError):
            event_from_dict(message)

    def test_rejects_invalid_json(self):
        with pytest.raises(EventDecodeError):
            parse_event("{not json")
