#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Durable storage for the scheduler's config and runtime state.

Both files are single JSON objects rewritten in full through a temp file and
a rename. Unreadable files fall back to defaults.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Union

from ..models.scheduler import AppConfig, AppState
from ..utils.path import atomic_write_json, read_json_object
from .quiet_hours import parse_hhmm

logger = logging.getLogger(__name__)


class ConfigStore:
    """Loads and saves AppConfig, always clamping the interval to the minimum."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> AppConfig:
        data = read_json_object(self.path)
        if data is None:
            return AppConfig()
        config = AppConfig.from_dict(data)
        if config.quiet_hours is not None:
            try:
                parse_hhmm(config.quiet_hours.start)
                parse_hhmm(config.quiet_hours.end)
            except ValueError as e:
                logger.warning("Ignoring quiet hours in %s: %s", self.path, e)
                config = replace(config, quiet_hours=None)
        return config

    def save(self, config: AppConfig) -> AppConfig:
        config = config.normalized()
        atomic_write_json(self.path, config.to_dict())
        logger.debug("Saved config to %s: %s", self.path, config)
        return config


class StateStore:
    """Loads and saves AppState."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> AppState:
        data = read_json_object(self.path)
        if data is None:
            return AppState()
        return AppState.from_dict(data)

    def load_or_create(self) -> AppState:
        """First boot writes an empty state file so later rewrites are plain replaces."""
        if not self.path.exists():
            logger.info("Creating empty scheduler state at %s", self.path)
            self.save(AppState())
            return AppState()
        return self.load()

    def save(self, state: AppState) -> AppState:
        atomic_write_json(self.path, state.to_dict())
        return state
