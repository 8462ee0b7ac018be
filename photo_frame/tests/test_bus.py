#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for the in-memory and spool-directory event buses.
"""

import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from photo_frame.events.bus import MemoryBus, SpoolBus
from photo_frame.events.types import RemovedPhoto, RequestCurrent, RequestNext


def _take(bus, count):
    """Consume `count` events, then stop the subscription."""
    stop_event = threading.Event()
    taken = []
    for event in bus.subscribe(stop_event):
        taken.append(event)
        if len(taken) == count:
            stop_event.set()
    return taken


class TestMemoryBus:

    def test_publish_then_subscribe(self):
        bus = MemoryBus(poll_seconds=0.01)
        bus.publish(RequestNext(chat_id=1))
        bus.publish(RequestCurrent(chat_id=2))
        assert _take(bus, 2) == [RequestNext(chat_id=1), RequestCurrent(chat_id=2)]
        assert len(bus.published) == 2

    def test_drain(self):
        bus = MemoryBus()
        bus.publish(RemovedPhoto(photo_id="a"))
        assert bus.drain() == [RemovedPhoto(photo_id="a")]
        assert bus.drain() == []

    def test_subscribe_returns_when_stopped(self):
        stop_event = threading.Event()
        stop_event.set()
        assert list(MemoryBus(poll_seconds=0.01).subscribe(stop_event)) == []


class TestSpoolBus:

    def test_fan_out_to_every_inbox(self, tmp_path):
        scheduler = SpoolBus(tmp_path, inbox="scheduler", poll_seconds=0.01)
        processor = SpoolBus(tmp_path, inbox="processor", poll_seconds=0.01)

        SpoolBus(tmp_path).publish(RemovedPhoto(photo_id="p1"))

        assert len(scheduler.pending()) == 1
        assert len(processor.pending()) == 1
        assert _take(processor, 1) == [RemovedPhoto(photo_id="p1")]
        assert processor.pending() == []
        assert len(scheduler.pending()) == 1

    def test_preserves_publish_order(self, tmp_path):
        inbox = SpoolBus(tmp_path, inbox="a", poll_seconds=0.01)
        publisher = SpoolBus(tmp_path)
        for i in range(5):
            publisher.publish(RequestNext(chat_id=i))
        assert [e.chat_id for e in _take(inbox, 5)] == [0, 1, 2, 3, 4]

    def test_unacknowledged_event_is_redelivered(self, tmp_path):
        inbox = SpoolBus(tmp_path, inbox="a", poll_seconds=0.01)
        SpoolBus(tmp_path).publish(RequestNext(chat_id=1))

        stream = inbox.subscribe(threading.Event())
        assert next(stream) == RequestNext(chat_id=1)
        stream.close()  # consumer died before finishing

        assert len(inbox.pending()) == 1

    def test_undecodable_file_moved_to_dead_letters(self, tmp_path):
        inbox = SpoolBus(tmp_path, inbox="a", poll_seconds=0.01)
        (inbox.inbox_dir / "00000000000000000001-deadbeef.json").write_text('{"type": "bogus", "data": {}}')
        SpoolBus(tmp_path).publish(RequestNext(chat_id=3))

        assert _take(inbox, 1) == [RequestNext(chat_id=3)]
        assert [p.name for p in inbox.dead_letter_dir.iterdir()] == ["00000000000000000001-deadbeef.json"]

    def test_publish_without_subscribers_is_dropped(self, tmp_path, caplog):
        SpoolBus(tmp_path).publish(RequestNext(chat_id=1))
        assert "No subscribers registered" in caplog.text

    def test_publish_only_bus_has_no_inbox(self, tmp_path):
        with pytest.raises(ValueError):
            SpoolBus(tmp_path).inbox_dir
