"""Shared fixtures."""

import pytest
from fakes import ManualClock, RecordingSleep

from holdings_tracker.chains import ChainRegistry
from holdings_tracker.config import reset_config


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def registry() -> ChainRegistry:
    return ChainRegistry()


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()
