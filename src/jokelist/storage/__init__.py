"""Joke list persistence: factory + backends (file, memory)."""

from jokelist.storage.factory import create_joke_store
from jokelist.storage.json_store import JsonFileJokeStore
from jokelist.storage.memory_store import InMemoryJokeStore

__all__ = ["create_joke_store", "InMemoryJokeStore", "JsonFileJokeStore"]
