#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Scheduler status command.
"""

import logging

from ..config import StoragePaths
from ..jsonio import success
from ..registry.reader import RegistryReader
from ..scheduling.scheduler import DisplayScheduler, SchedulerContext, ShuffleSource
from ..scheduling.store import ConfigStore, StateStore
from ..storage.images import ImageStorage

logger = logging.getLogger(__name__)


class _IdleTimer:
    """Timer stand-in for one-shot inspection; never fires."""

    def arm(self, delay_seconds: float) -> None:
        pass

    def cancel(self) -> None:
        pass


def build_context(paths: StoragePaths, publish, **kwargs) -> SchedulerContext:
    return SchedulerContext(
        config_store=ConfigStore(paths.config_file),
        state_store=StateStore(paths.state_file),
        reader=RegistryReader(paths.registry_file),
        storage=ImageStorage(paths.photos_dir),
        publish=publish,
        **kwargs,
    )


def cmd_show_status(paths: StoragePaths, as_json: bool = False) -> int:
    """
    Show the rotation config, the persisted state and what the gate would
    decide right now for a scheduled and a manual rotation.

    Args:
        paths: Resolved data root
        as_json: Emit a JSON document instead of text

    Returns:
        Exit code
    """
    ctx = build_context(paths, publish=lambda event: None)
    scheduler = DisplayScheduler(ctx, _IdleTimer())
    scheduled = scheduler.can_shuffle_now(ShuffleSource.SCHEDULED)
    manual = scheduler.can_shuffle_now(ShuffleSource.MANUAL)
    candidates = len(ctx.storage.list_photo_ids())
    alive = len(ctx.reader.get_alive_index())

    if as_json:
        return success("status", {
            "config": ctx.config.to_dict(),
            "state": ctx.state.to_dict(),
            "gate": {"scheduled": scheduled.to_dict(), "manual": manual.to_dict()},
            "candidates": candidates,
            "alive": alive,
        }, meta={"data_root": str(paths.root)})

    config = ctx.config
    state = ctx.state
    print("=" * 60)
    print("PHOTO FRAME STATUS")
    print("=" * 60)
    print(f"Data root:            {paths.root}")
    print(f"Stored photos:        {candidates}")
    print(f"Alive in registry:    {alive}")
    print(f"Shuffle interval:     {config.default_shuffle_minutes} min (minimum {config.min_shuffle_minutes} min)")
    if config.quiet_hours is not None:
        qh = config.quiet_hours
        print(f"Quiet hours:          {qh.start}-{qh.end} ({'enabled' if qh.enabled else 'disabled'})")
    else:
        print("Quiet hours:          not set")
    print(f"Last display:         {state.last_display_at or 'never'}")
    print(f"Current photo:        {state.current_photo_id or '-'}")

    print("\nGATE:")
    for label, decision in (("scheduled", scheduled), ("manual", manual)):
        if decision.allowed:
            print(f"  {label:<10} allowed")
        else:
            print(f"  {label:<10} wait {decision.wait_ms / 1000:.0f} s "
                  f"(min gap {decision.min_gate_ms} ms, quiet hours {decision.quiet_hours_ms} ms)")
    return 0
