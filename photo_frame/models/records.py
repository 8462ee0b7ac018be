#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Registry log record types for the photo frame engine.

The registry is a JSONL file of two record kinds, `photo` and `tombstone`.
Records are immutable once appended; the dataclasses here are frozen and
convert to and from the camelCase wire layout.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from ..config import UNKNOWN_NAME, UNKNOWN_USERNAME

PHOTO_KIND = "photo"
TOMBSTONE_KIND = "tombstone"


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_str(value: Any, default: str = "") -> str:
    return default if value is None else str(value)


@dataclass(frozen=True)
class PhotoOrigin:
    """Who submitted a photo, and from where."""
    chat_id: int = 0
    photo_id: str = ""  # remote id, e.g. the chat platform's file id
    source_url: str = ""
    user_id: int = 0
    username: str = UNKNOWN_USERNAME
    first_name: str = UNKNOWN_NAME
    last_name: str = UNKNOWN_NAME
    submitted_at: str = ""

    @classmethod
    def unknown(cls, photo_id: str, source_url: str, submitted_at: str) -> "PhotoOrigin":
        """Placeholder provenance for a file found on disk without a record."""
        return cls(photo_id=photo_id, source_url=source_url, submitted_at=submitted_at)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chatId": self.chat_id,
            "photoId": self.photo_id,
            "sourceUrl": self.source_url,
            "userId": self.user_id,
            "username": self.username,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "submittedAt": self.submitted_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhotoOrigin":
        # `photoUrl` and `timestamp` are the field names of the older layout
        return cls(
            chat_id=_as_int(data.get("chatId")),
            photo_id=_as_str(data.get("photoId")),
            source_url=_as_str(data.get("sourceUrl", data.get("photoUrl"))),
            user_id=_as_int(data.get("userId")),
            username=_as_str(data.get("username"), UNKNOWN_USERNAME),
            first_name=_as_str(data.get("firstName"), UNKNOWN_NAME),
            last_name=_as_str(data.get("lastName"), UNKNOWN_NAME),
            submitted_at=_as_str(data.get("submittedAt", data.get("timestamp"))),
        )


@dataclass(frozen=True)
class PhotoStorage:
    """Where the stored file lives."""
    absolute_path: str
    size_bytes: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"absolutePath": self.absolute_path}
        if self.size_bytes is not None:
            out["sizeBytes"] = self.size_bytes
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhotoStorage":
        path = data.get("absolutePath", data.get("path"))
        size = data.get("sizeBytes", data.get("bytes"))
        return cls(
            absolute_path=_as_str(path),
            size_bytes=_as_int(size) if size is not None else None,
        )


@dataclass(frozen=True)
class PhotoRecord:
    """A photo became available under `photo_id`."""
    photo_id: str
    added_at: str
    origin: PhotoOrigin = field(default_factory=PhotoOrigin)
    storage: PhotoStorage = field(default_factory=lambda: PhotoStorage(""))
    kind: str = field(default=PHOTO_KIND, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "photoId": self.photo_id,
            "addedAt": self.added_at,
            "origin": self.origin.to_dict(),
            "storage": self.storage.to_dict(),
        }


@dataclass(frozen=True)
class TombstoneRecord:
    """`photo_id` must be treated as deleted from this point in the log."""
    photo_id: str
    deleted_at: str
    kind: str = field(default=TOMBSTONE_KIND, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "photoId": self.photo_id, "deletedAt": self.deleted_at}


RegistryRecord = Union[PhotoRecord, TombstoneRecord]


def record_from_dict(data: Any) -> Optional[RegistryRecord]:
    """Build a record from a decoded JSON value.

    Returns None for anything that is not an object with a recognized `kind`
    and a non-empty `photoId`.
    """
    if not isinstance(data, dict):
        return None
    kind = data.get("kind")
    photo_id = data.get("photoId")
    if not isinstance(photo_id, str) or not photo_id:
        return None

    if kind == PHOTO_KIND:
        origin = data.get("origin", data.get("telegram"))
        storage = data.get("storage")
        return PhotoRecord(
            photo_id=photo_id,
            added_at=_as_str(data.get("addedAt")),
            origin=PhotoOrigin.from_dict(origin if isinstance(origin, dict) else {}),
            storage=PhotoStorage.from_dict(storage if isinstance(storage, dict) else {}),
        )
    if kind == TOMBSTONE_KIND:
        return TombstoneRecord(photo_id=photo_id, deleted_at=_as_str(data.get("deletedAt")))
    return None
