"""Pydantic models for configuration, jokes, and controller state."""
from jokelist.core.models.config import (
    JokeListConfig,
    JokesConfig,
    SourceConfig,
    StorageConfig,
    SystemConfig,
)
from jokelist.core.models.event import Event
from jokelist.core.models.joke import Joke
from jokelist.core.models.state import JokeListSnapshot, JokeListStatus

__all__ = [
    "JokeListConfig",
    "JokesConfig",
    "SourceConfig",
    "StorageConfig",
    "SystemConfig",
    "Event",
    "Joke",
    "JokeListSnapshot",
    "JokeListStatus",
]
