#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Bus event definitions.

Each event kind is a frozen dataclass whose `TYPE` is the wire tag. On the
bus an event travels as `{"type": TYPE, "data": {...camelCase...},
"timestamp": iso}`.
"""

import json
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, Optional, Type, Union

from ..utils.time import now_iso


class EventDecodeError(ValueError):
    """Raised for bus messages that are not a known, well-formed event."""


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass(frozen=True)
class _Event:
    TYPE: ClassVar[str] = ""

    def data(self) -> Dict[str, Any]:
        """Wire payload; optional fields that are None are left out."""
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and f.default is None:
                continue
            out[_camel(f.name)] = value
        return out


@dataclass(frozen=True)
class AddedPhoto(_Event):
    TYPE: ClassVar[str] = "added_photo"
    photo_id: str
    photo_url: str
    chat_id: int = 0
    user_id: int = 0
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    timestamp: str = field(default_factory=now_iso)


@dataclass(frozen=True)
class RemovedPhoto(_Event):
    TYPE: ClassVar[str] = "removed_photo"
    photo_id: str


@dataclass(frozen=True)
class SetShuffle(_Event):
    TYPE: ClassVar[str] = "set_shuffle"
    minutes: float
    requested_by: Optional[str] = None
    chat_id: Optional[int] = None


@dataclass(frozen=True)
class SetQuietHours(_Event):
    TYPE: ClassVar[str] = "set_quiet_hours"
    enabled: bool
    start: str
    end: str
    requested_by: Optional[str] = None
    chat_id: Optional[int] = None


@dataclass(frozen=True)
class RequestNext(_Event):
    TYPE: ClassVar[str] = "request_next"
    chat_id: int
    requested_by: Optional[str] = None


@dataclass(frozen=True)
class RequestCurrent(_Event):
    TYPE: ClassVar[str] = "request_current"
    chat_id: int


@dataclass(frozen=True)
class DisplayPhoto(_Event):
    TYPE: ClassVar[str] = "display_photo"
    photo_url: str
    photo_id: Optional[str] = None


@dataclass(frozen=True)
class NextResult(_Event):
    TYPE: ClassVar[str] = "next_result"
    chat_id: int
    ok: bool
    ms_remaining: Optional[int] = None
    no_images: Optional[bool] = None


@dataclass(frozen=True)
class CurrentResult(_Event):
    TYPE: ClassVar[str] = "current_result"
    chat_id: int
    ok: Optional[bool] = None
    photo_url: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    no_images: Optional[bool] = None


@dataclass(frozen=True)
class ConfigResult(_Event):
    TYPE: ClassVar[str] = "config_result"
    chat_id: int
    minutes: float
    min_minutes: float
    quiet_hours: Optional[Dict[str, Any]] = None


Event = Union[
    AddedPhoto, RemovedPhoto, SetShuffle, SetQuietHours, RequestNext, RequestCurrent,
    DisplayPhoto, NextResult, CurrentResult, ConfigResult,
]

EVENT_TYPES: Dict[str, Type[_Event]] = {
    cls.TYPE: cls for cls in (
        AddedPhoto, RemovedPhoto, SetShuffle, SetQuietHours, RequestNext, RequestCurrent,
        DisplayPhoto, NextResult, CurrentResult, ConfigResult,
    )
}


def event_to_dict(event: Event) -> Dict[str, Any]:
    return {"type": event.TYPE, "data": event.data(), "timestamp": now_iso()}


def serialize_event(event: Event) -> str:
    return json.dumps(event_to_dict(event), ensure_ascii=False)


def event_from_dict(message: Any) -> Event:
    """Build an event from a decoded envelope; EventDecodeError if it does not fit."""
    if not isinstance(message, dict):
        raise EventDecodeError("Event envelope must be a JSON object")
    kind = message.get("type")
    cls = EVENT_TYPES.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise EventDecodeError(f"Unknown event type: {kind!r}")
    data = message.get("data")
    if not isinstance(data, dict):
        raise EventDecodeError(f"Event {kind} has no data object")

    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        key = _camel(f.name)
        if key in data:
            kwargs[f.name] = data[key]
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise EventDecodeError(f"Malformed {kind} event: {e}") from e


def parse_event(raw: Union[str, bytes]) -> Event:
    try:
        message = json.loads(raw)
    except ValueError as e:
        raise EventDecodeError(f"Event is not valid JSON: {e}") from e
    return event_from_dict(message)
