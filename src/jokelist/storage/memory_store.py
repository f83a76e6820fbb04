"""In-memory store implementation for testing and ephemeral runs.

Keeps the list in a plain dict and can be told to fail on purpose so tests
can exercise the controller's persistence error paths.
"""

from __future__ import annotations

from jokelist.core.errors import PersistenceError
from jokelist.core.interfaces.collaborators import JokeStore
from jokelist.core.models.joke import Joke


class InMemoryJokeStore(JokeStore):
    """A dict-backed store that records calls in memory.

    Attributes:
        fail_on_load: Raise :class:`PersistenceError` from :meth:`load`.
        fail_on_save: Raise :class:`PersistenceError` from :meth:`save`.
        save_count: Number of successful :meth:`save` calls.
        clear_count: Number of :meth:`clear` calls.
    """

    def __init__(self, key: str = "jokes", initial: list[Joke] | None = None) -> None:
        self._key = key
        self._data: dict[str, list[Joke]] = {}
        if initial is not None:
            self._data[key] = list(initial)
        self.fail_on_load = False
        self.fail_on_save = False
        self.save_count = 0
        self.clear_count = 0

    @property
    def saved(self) -> list[Joke] | None:
        """The currently stored list, bypassing failure switches."""
        value = self._data.get(self._key)
        return list(value) if value is not None else None

    def load(self) -> list[Joke] | None:
        if self.fail_on_load:
            raise PersistenceError("Simulated load failure")
        return self.saved

    def save(self, jokes: list[Joke]) -> None:
        if self.fail_on_save:
            raise PersistenceError("Simulated save failure")
        self._data[self._key] = list(jokes)
        self.save_count += 1

    def clear(self) -> None:
        self._data.pop(self._key, None)
        self.clear_count += 1
