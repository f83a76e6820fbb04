"""Joke sources: factory + backends (icanhazdadjoke HTTP, static offline)."""

from jokelist.source.dad_joke_source import DadJokeSource
from jokelist.source.factory import create_joke_source
from jokelist.source.static_source import StaticJokeSource

__all__ = ["create_joke_source", "DadJokeSource", "StaticJokeSource"]
