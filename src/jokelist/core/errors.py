"""Exception hierarchy for the joke list.

None of these are fatal to the process: the controller absorbs them and
surfaces source failures as a ``FAILED`` status.
"""

from __future__ import annotations


class JokeListError(Exception):
    """Base class for all joke-list errors."""


class SourceFetchError(JokeListError):
    """A joke source call failed or returned malformed data."""


class SourceExhaustedError(SourceFetchError):
    """The attempt cap was reached before the fill quota was met."""

    def __init__(self, attempts: int, unique: int, target: int) -> None:
        super().__init__(
            f"Source exhausted after {attempts} attempts ({unique}/{target} unique jokes)"
        )
        self.attempts = attempts
        self.unique = unique
        self.target = target


class PersistenceError(JokeListError):
    """The key-value store could not be read or written."""
