"""Shared pytest fixtures for Joke List tests."""

from __future__ import annotations

import pytest

from jokelist.core.event_bus import EventBus
from jokelist.core.models.config import JokeListConfig
from jokelist.storage.memory_store import InMemoryJokeStore


@pytest.fixture
async def event_bus():
    """Provide a started EventBus that is stopped after the test."""
    bus = EventBus(queue_size=100)
    await bus.start()
    yield bus
    await bus.stop()


@pytest.fixture(scope="session")
def jokelist_config() -> JokeListConfig:
    """Session-scoped default config (no file I/O)."""
    return JokeListConfig()


@pytest.fixture
def store() -> InMemoryJokeStore:
    """Fresh, empty in-memory store."""
    return InMemoryJokeStore()
