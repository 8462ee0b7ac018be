#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for the registry log writer and the folding reader.
"""

import json
import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from photo_frame.models.records import PhotoOrigin, PhotoRecord, TombstoneRecord, record_from_dict
from photo_frame.registry.reader import RegistryReader, fold_records, iter_records
from photo_frame.registry.writer import RegistryWriter, strip_image_ext
from tests.fixtures.registry_setup import photo_line, tombstone_line, write_registry_lines


def _lines(path: Path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestStripImageExt:

    def test_strips_jpg(self):
        assert strip_image_ext("abc.jpg") == "abc"

    def test_uses_basename(self):
        assert strip_image_ext("/data/photos/abc.jpg") == "abc"

    def test_leaves_other_names(self):
        assert strip_image_ext("abc.png") == "abc.png"
        assert strip_image_ext("abc") == "abc"


class TestRegistryWriter:

    def test_append_photo_writes_one_line(self, writer, paths):
        record = writer.append_photo("p1.jpg", "/x/p1.jpg", size_bytes=123)

        lines = _lines(paths.registry_file)
        assert len(lines) == 1
        assert lines[0]["kind"] == "photo"
        assert lines[0]["photoId"] == "p1"
        assert lines[0]["storage"] == {"absolutePath": "/x/p1.jpg", "sizeBytes": 123}
        assert lines[0]["addedAt"].endswith("Z")
        assert record.photo_id == "p1"

    def test_origin_defaults_to_logical_id_and_path(self, writer):
        record = writer.append_photo("p1", "/x/p1.jpg")
        assert record.origin.photo_id == "p1"
        assert record.origin.source_url == "/x/p1.jpg"
        assert record.origin.username == "Unknown"

    def test_origin_fields_kept(self, writer):
        origin = PhotoOrigin(chat_id=5, photo_id="remote-9", source_url="http://x/y", user_id=3, username="bob")
        record = writer.append_photo("p1", "/x/p1.jpg", origin=origin)
        assert record.origin == origin

    def test_append_tombstone(self, writer, paths):
        writer.append_photo("p1", "/x/p1.jpg")
        writer.append_tombstone("p1.jpg")

        lines = _lines(paths.registry_file)
        assert [l["kind"] for l in lines] == ["photo", "tombstone"]
        assert lines[1]["photoId"] == "p1"
        assert "deletedAt" in lines[1]

    def test_durable_append(self, paths):
        writer = RegistryWriter(paths.registry_file, durable=True)
        writer.append_photo("p1", "/x/p1.jpg")
        writer.append_photo("p2", "/x/p2.jpg")
        assert len(_lines(paths.registry_file)) == 2

    def test_no_duplicate_check(self, writer, paths):
        writer.append_photo("p1", "/x/p1.jpg")
        writer.append_photo("p1", "/x/p1.jpg")
        assert len(_lines(paths.registry_file)) == 2


class TestFold:

    def test_last_record_wins(self, paths):
        write_registry_lines(paths.registry_file, [
            photo_line("A", "/x/A.jpg", username="first"),
            tombstone_line("A"),
            photo_line("A", "/x/A.jpg", added_at="2024-05-03T10:00:00.000Z", username="second"),
        ])
        reader = RegistryReader(paths.registry_file)
        record = reader.get_by_photo_id("A")
        assert record is not None
        assert record.origin.username == "second"
        assert record.added_at == "2024-05-03T10:00:00.000Z"

    def test_tombstone_last_means_deleted(self, paths):
        write_registry_lines(paths.registry_file, [photo_line("A", "/x/A.jpg"), tombstone_line("A")])
        reader = RegistryReader(paths.registry_file)
        assert reader.get_by_photo_id("A") is None
        assert reader.get_all_photos() == []

    def test_photo_record_replaced_by_later_photo(self):
        first = record_from_dict(photo_line("A", "/x/a1.jpg"))
        second = record_from_dict(photo_line("A", "/x/a2.jpg"))
        index = fold_records([first, second])
        assert len(index) == 1
        assert index.get("A").storage.absolute_path == "/x/a2.jpg"

    def test_lookup_by_path(self, paths):
        write_registry_lines(paths.registry_file, [photo_line("A", "/x/A.jpg")])
        reader = RegistryReader(paths.registry_file)
        assert reader.get_by_path("/x/A.jpg").photo_id == "A"
        assert reader.get_by_path("/x/B.jpg") is None

    def test_missing_file_is_empty(self, tmp_path):
        reader = RegistryReader(tmp_path / "nope.jsonl")
        assert reader.get_all_photos() == []
        assert len(reader.get_alive_index()) == 0

    def test_malformed_lines_skipped(self, paths, caplog):
        write_registry_lines(paths.registry_file, [
            photo_line("A", "/x/A.jpg"),
            "{not json",
            json.dumps({"kind": "mystery", "photoId": "Z"}),
            json.dumps({"kind": "photo"}),
            photo_line("B", "/x/B.jpg"),
        ])
        with caplog.at_level("WARNING"):
            records = list(iter_records(paths.registry_file))
        assert [r.photo_id for r in records] == ["A", "B"]
        assert "Skipping malformed registry line 2" in caplog.text

    def test_history_in_log_order(self, paths):
        write_registry_lines(paths.registry_file, [
            photo_line("A", "/x/A.jpg"), photo_line("B", "/x/B.jpg"), tombstone_line("A"),
        ])
        history = RegistryReader(paths.registry_file).history("A")
        assert [type(r) for r in history] == [PhotoRecord, TombstoneRecord]


class TestReaderCache:

    def test_refreshes_after_append(self, writer, reader):
        assert reader.get_all_photos() == []
        writer.append_photo("p1", "/x/p1.jpg")
        assert [p.photo_id for p in reader.get_all_photos()] == ["p1"]
        writer.append_tombstone("p1")
        assert reader.get_all_photos() == []

    def test_cached_when_unchanged(self, writer, reader, mocker):
        writer.append_photo("p1", "/x/p1.jpg")
        reader.get_alive_index()
        spy = mocker.patch("photo_frame.registry.reader.fold_records")
        reader.get_alive_index()
        reader.get_by_photo_id("p1")
        spy.assert_not_called()


class TestRecordDecoding:

    def test_legacy_keys(self):
        record = record_from_dict({
            "kind": "photo",
            "photoId": "A",
            "addedAt": "2024-01-01T00:00:00.000Z",
            "telegram": {"chatId": "12", "photoUrl": "http://x", "timestamp": "t0", "username": "u"},
            "storage": {"path": "/x/A.jpg", "bytes": 99},
        })
        assert record.origin.chat_id == 12
        assert record.origin.source_url == "http://x"
        assert record.origin.submitted_at == "t0"
        assert record.storage.absolute_path == "/x/A.jpg"
        assert record.storage.size_bytes == 99

    @pytest.mark.parametrize("value", [None, [], "x", {"kind": "photo", "photoId": ""}, {"photoId": "A"}])
    def test_invalid_values(self, value):
        assert record_from_dict(value) is None

    def test_round_trip_layout(self):
        line = photo_line("A", os.path.join("/x", "A.jpg"))
        assert record_from_dict(line).to_dict() == line
