#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for the filesystem-wins reconciler and its daily service.
"""

import os
import sys
import threading
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from photo_frame.reconcile.reconciler import Reconciler
from photo_frame.reconcile.service import ReconcilerService, seconds_until
from tests.fixtures.registry_setup import store_photo


class _Clock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestReconciler:

    def test_tombstones_missing_files(self, paths, writer, reader, storage):
        path = store_photo(paths, "p1")
        path.unlink()

        result = Reconciler(writer, reader, storage).reconcile()

        assert result.tombstoned == 1
        assert result.added == 0
        assert reader.get_by_photo_id("p1") is None

    def test_adds_untracked_files_with_unknown_origin(self, paths, writer, reader, storage):
        path = store_photo(paths, "orphan", register=False)
        mtime = 1_700_000_000
        os.utime(path, (mtime, mtime))

        result = Reconciler(writer, reader, storage).reconcile()

        assert result.added == 1
        record = reader.get_by_photo_id("orphan")
        assert record is not None
        assert record.origin.username == "Unknown"
        assert record.origin.first_name == "-"
        assert record.origin.last_name == "-"
        assert record.origin.chat_id == 0
        assert record.added_at == "2023-11-14T22:13:20.000Z"
        assert record.origin.submitted_at == record.added_at
        assert record.storage.absolute_path == str(path)
        assert record.storage.size_bytes == path.stat().st_size

    def test_second_run_is_a_no_op(self, paths, writer, reader, storage):
        store_photo(paths, "a")
        store_photo(paths, "b", register=False)
        gone = store_photo(paths, "c")
        gone.unlink()
        reconciler = Reconciler(writer, reader, storage)

        first = reconciler.reconcile()
        second = reconciler.reconcile()

        assert (first.added, first.tombstoned) == (1, 1)
        assert second.to_dict() == {"added": 0, "tombstoned": 0, "skipped": False}

    def test_tracked_and_present_untouched(self, paths, writer, reader, storage):
        store_photo(paths, "a")
        before = paths.registry_file.read_text()
        result = Reconciler(writer, reader, storage).reconcile()
        assert (result.added, result.tombstoned) == (0, 0)
        assert paths.registry_file.read_text() == before

    def test_ignores_non_jpg(self, paths, writer, reader, storage):
        (paths.photos_dir / "notes.txt").write_text("hello")
        (paths.photos_dir / ".hidden.jpg").write_bytes(b"x")
        result = Reconciler(writer, reader, storage).reconcile()
        assert result.added == 0

    def test_concurrent_trigger_is_skipped(self, writer, reader, storage):
        reconciler = Reconciler(writer, reader, storage)
        reconciler._running.acquire()
        try:
            result = reconciler.reconcile()
        finally:
            reconciler._running.release()
        assert result.skipped is True
        assert (result.added, result.tombstoned) == (0, 0)


class TestGracePeriod:

    def test_missing_file_tombstoned_after_grace(self, paths, writer, reader, storage):
        store_photo(paths, "p1").unlink()
        clock = _Clock(1000.0)
        reconciler = Reconciler(writer, reader, storage, missing_grace_seconds=60, clock=clock)

        assert reconciler.reconcile().tombstoned == 0
        clock.now += 30
        assert reconciler.reconcile().tombstoned == 0
        clock.now += 31
        assert reconciler.reconcile().tombstoned == 1
        assert reader.get_by_photo_id("p1") is None

    def test_file_that_reappears_resets_grace(self, paths, writer, reader, storage):
        path = store_photo(paths, "p1")
        data = path.read_bytes()
        path.unlink()
        clock = _Clock(1000.0)
        reconciler = Reconciler(writer, reader, storage, missing_grace_seconds=60, clock=clock)

        reconciler.reconcile()
        path.write_bytes(data)
        clock.now += 30
        reconciler.reconcile()
        path.unlink()
        clock.now += 40
        assert reconciler.reconcile().tombstoned == 0

    def test_recent_untracked_file_waits(self, paths, writer, reader, storage):
        path = store_photo(paths, "fresh", register=False)
        mtime = path.stat().st_mtime
        clock = _Clock(mtime + 5)
        reconciler = Reconciler(writer, reader, storage, missing_grace_seconds=60, clock=clock)

        assert reconciler.reconcile().added == 0
        clock.now = mtime + 61
        assert reconciler.reconcile().added == 1


class TestReconcilerService:

    def test_seconds_until_later_today(self):
        assert seconds_until(3, 30, now=datetime(2024, 1, 1, 3, 0)) == 1800

    def test_seconds_until_wraps_to_tomorrow(self):
        assert seconds_until(3, 30, now=datetime(2024, 1, 1, 3, 30)) == 24 * 3600

    def test_run_once_logs_io_errors(self, mocker, caplog):
        reconciler = mocker.Mock()
        reconciler.reconcile.side_effect = OSError("disk gone")
        service = ReconcilerService(reconciler)
        assert service.run_once() is None
        assert "Reconciliation failed" in caplog.text

    def test_run_forever_runs_at_boot_then_stops(self, mocker):
        reconciler = mocker.Mock()
        stop_event = threading.Event()
        stop_event.set()
        ReconcilerService(reconciler).run_forever(stop_event)
        reconciler.reconcile.assert_called_once()

    def test_run_forever_waits_for_next_slot(self, mocker):
        reconciler = mocker.Mock()
        stop_event = mocker.Mock()
        stop_event.is_set.return_value = False
        stop_event.wait.side_effect = [False, True]
        service = ReconcilerService(reconciler, run_at=(3, 30), now=lambda: datetime(2024, 1, 1, 3, 0))

        service.run_forever(stop_event)

        assert reconciler.reconcile.call_count == 2
        stop_event.wait.assert_called_with(1800.0)
