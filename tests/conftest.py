"""Shared fixtures for sysguard tests."""

import pytest
from helpers import InlineExecutor, ManualTimer, StaticProvider, raw_entries

from sysguard.config import Settings
from sysguard.controller import ProcessViewController
from sysguard.monitor import SnapshotCollector


@pytest.fixture
def timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture
def published() -> list:
    return []


@pytest.fixture
def make_controller(timer, published):
    """Factory for controllers wired to a static provider and a manual timer."""

    def factory(entries=None, page_size=50, interval=2.0, executor=None, own_pid=999_999):
        provider = StaticProvider(raw_entries(120) if entries is None else entries)
        return ProcessViewController(
            Settings(page_size=page_size, refresh_interval=interval),
            timer,
            publish=published.append,
            collector=SnapshotCollector(provider),
            executor=executor or InlineExecutor(),
            own_pid=own_pid,
        )

    return factory
