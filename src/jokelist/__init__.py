"""Joke List — vote on, lock, and regenerate a list of dad jokes."""

__version__ = "1.0.0"
