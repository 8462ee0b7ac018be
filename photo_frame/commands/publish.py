#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Put a control event on the spool bus, as a chat front-end would.
"""

import logging

from ..config import StoragePaths
from ..events.bus import SpoolBus
from ..events.types import Event, event_to_dict
from ..jsonio import success

logger = logging.getLogger(__name__)


def cmd_publish(paths: StoragePaths, event: Event, as_json: bool = False) -> int:
    bus = SpoolBus(paths.bus_dir)
    bus.publish(event)
    logger.info("Published %s", event.TYPE)
    if as_json:
        return success("publish", event_to_dict(event))
    print(f"Published {event.TYPE}: {event.data()}")
    return 0
