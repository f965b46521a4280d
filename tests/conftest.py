"""Fixtures for pypimalink tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from pypimalink.identity import MemorySettingsStore
from pypimalink.models import PairedEntity
from pypimalink.pairing import PimalinkPairing

from .common import PAIR_ID, WEB_USER_ID


@pytest.fixture
def mock_transport():
    """Transport whose post() is an AsyncMock; tests set side_effect/return_value."""
    transport = MagicMock()
    transport.post = AsyncMock()
    return transport


@pytest.fixture
def store():
    return MemorySettingsStore()


@pytest.fixture
def pairing(mock_transport, store):
    return PimalinkPairing(mock_transport, store, WEB_USER_ID)


@pytest.fixture
def entity():
    return PairedEntity(pair_id=PAIR_ID, name="Home")


@pytest.fixture
def sample_notifications():
    """Notification feed, newest first."""
    return [
        {"message": "Zone 3 battery low", "date": "18/10/2026 10:01"},
        {"message": "Disarm by user 1", "date": "18/10/2026 09:58"},
        {"message": "Full Arm by user 1", "date": "18/10/2026 08:00"},
    ]
