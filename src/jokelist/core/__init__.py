"""Core services: event bus and the joke list controller."""

from jokelist.core.event_bus import EventBus
from jokelist.core.joke_list import JokeListController

__all__ = [
    "EventBus",
    "JokeListController",
]
