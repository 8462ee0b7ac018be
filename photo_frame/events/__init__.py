"""Bus events and transports."""

from .types import (
    Event, EventDecodeError, EVENT_TYPES,
    AddedPhoto, RemovedPhoto, SetShuffle, SetQuietHours, RequestNext, RequestCurrent,
    DisplayPhoto, NextResult, CurrentResult, ConfigResult,
    event_to_dict, event_from_dict, serialize_event, parse_event,
)
from .bus import EventBus, MemoryBus, SpoolBus

__all__ = [
    'Event', 'EventDecodeError', 'EVENT_TYPES',
    'AddedPhoto', 'RemovedPhoto', 'SetShuffle', 'SetQuietHours', 'RequestNext', 'RequestCurrent',
    'DisplayPhoto', 'NextResult', 'CurrentResult', 'ConfigResult',
    'event_to_dict', 'event_from_dict', 'serialize_event', 'parse_event',
    'EventBus', 'MemoryBus', 'SpoolBus',
]
