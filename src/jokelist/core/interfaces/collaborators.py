"""Collaborator interfaces (ABCs).

The controller only talks to its joke source and its store through these
classes.  The HTTP / file backends and the in-memory / static backends both
implement them, so tests can swap in fakes with controllable behaviour.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from jokelist.core.models.joke import Joke


# ---------------------------------------------------------------------------
# Joke source
# ---------------------------------------------------------------------------

class JokeSource(ABC):
    """Produces one independently random joke per call."""

    @abstractmethod
    def fetch_random_joke(self) -> Joke:
        """Return a fresh joke with ``votes=0`` and ``locked=False``.

        Raises:
            SourceFetchError: On network, HTTP, or parse failure.
        """


# ---------------------------------------------------------------------------
# Key-value store
# ---------------------------------------------------------------------------

class JokeStore(ABC):
    """Durable copy of the joke list under a single collection key.

    No transactional guarantees: the last write wins.
    """

    @abstractmethod
    def load(self) -> list[Joke] | None:
        """Return the saved list, or ``None`` when nothing is saved.

        Raises:
            PersistenceError: If the stored data is unreadable or corrupt.
        """

    @abstractmethod
    def save(self, jokes: list[Joke]) -> None:
        """Replace the saved list with *jokes*.

        Raises:
            PersistenceError: If the store cannot be written.
        """

    @abstractmethod
    def clear(self) -> None:
        """Remove the saved list entirely."""
