#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Shared pytest fixtures for the photo frame engine.
"""

import logging
import random
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Make both the package and the tests helpers importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent))

from photo_frame.events.bus import MemoryBus
from photo_frame.registry.reader import RegistryReader
from photo_frame.registry.writer import RegistryWriter
from photo_frame.scheduling.scheduler import DisplayScheduler, SchedulerContext
from photo_frame.scheduling.store import ConfigStore, StateStore
from photo_frame.storage.images import ImageStorage
from tests.fixtures.registry_setup import FakeClock, FakeTimer, create_data_root


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """CLI tests reconfigure the root logger; put it back afterwards."""
    root = logging.getLogger()
    before, level = list(root.handlers), root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler and handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def paths(tmp_path):
    """Fresh data root under pytest's tmp dir."""
    return create_data_root(tmp_path / "data")


@pytest.fixture
def writer(paths):
    return RegistryWriter(paths.registry_file, durable=False)


@pytest.fixture
def reader(paths):
    return RegistryReader(paths.registry_file)


@pytest.fixture
def storage(paths):
    return ImageStorage(paths.photos_dir)


@pytest.fixture
def clock():
    """Fixed local time: 2024-06-01 12:00."""
    return FakeClock(datetime(2024, 6, 1, 12, 0, 0).astimezone())


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def bus():
    return MemoryBus(poll_seconds=0.01)


@pytest.fixture
def scheduler_ctx(paths, reader, storage, bus, clock):
    return SchedulerContext(
        config_store=ConfigStore(paths.config_file),
        state_store=StateStore(paths.state_file),
        reader=reader,
        storage=storage,
        publish=bus.publish,
        clock=clock,
        cooldown=2,
        rng=random.Random(1234),
    )


@pytest.fixture
def scheduler(scheduler_ctx, timer):
    return DisplayScheduler(scheduler_ctx, timer)
