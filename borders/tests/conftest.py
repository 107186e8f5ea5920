"""Pytest fixtures for border coordinator tests."""
import sys
from pathlib import Path

import pytest

BORDERS_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BORDERS_DIR))

from coordinator.border_coordinator import BorderCoordinator
from coordinator.border_state import BorderState
from coordinator.sinks import RecordingSink, StaticInventorySource


@pytest.fixture
def state():
    return BorderState()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def inventories():
    return StaticInventorySource()


@pytest.fixture
def coordinator(sink, inventories, tmp_path):
    return BorderCoordinator(sink=sink, source=inventories,
                             state_path=str(tmp_path / 'borders_state.json'))
