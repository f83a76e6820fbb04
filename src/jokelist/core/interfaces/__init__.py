"""Collaborator interfaces: joke source and key-value store."""

from jokelist.core.interfaces.collaborators import JokeSource, JokeStore

__all__ = [
    "JokeSource",
    "JokeStore",
]
