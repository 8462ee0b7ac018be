"""Display scheduling: picker, quiet hours, persistence and the scheduler engine."""

from .picker import HistoryRandomPicker
from .quiet_hours import parse_hhmm, is_window_active, minutes_until_window_end, time_until_window_end
from .store import ConfigStore, StateStore
from .scheduler import (
    DisplayScheduler, SchedulerContext, ShuffleSource, GateDecision, DisplayOutcome, DisplayStatus,
    CurrentPhoto, display_meta, local_now,
)
from .loop import SchedulerLoop, TickTimer

__all__ = [
    'HistoryRandomPicker',
    'parse_hhmm', 'is_window_active', 'minutes_until_window_end', 'time_until_window_end',
    'ConfigStore', 'StateStore',
    'DisplayScheduler', 'SchedulerContext', 'ShuffleSource', 'GateDecision', 'DisplayOutcome',
    'DisplayStatus', 'CurrentPhoto', 'display_meta', 'local_now',
    'SchedulerLoop', 'TickTimer',
]
