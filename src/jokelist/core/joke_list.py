"""Joke list controller — fetch, dedupe, merge, persist, sort.

The controller exclusively owns the in-memory list.  The store holds a
durable copy that is re-saved after every successful mutation, with one
exception: :meth:`JokeListController.reset_votes` clears the store and does
*not* save the zeroed list, so a reload after a reset starts from scratch.

Fills run as a single asyncio task at a time.  Each source call is made in a
worker thread (the HTTP client blocks) and awaited before the next one is
issued.  While a fill runs the list is frozen: votes, lock toggles and
resets are ignored the same way a second fill is.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from jokelist.core import events
from jokelist.core.errors import PersistenceError, SourceExhaustedError, SourceFetchError
from jokelist.core.event_bus import EventBus
from jokelist.core.interfaces.collaborators import JokeSource, JokeStore
from jokelist.core.models.joke import Joke
from jokelist.core.models.state import JokeListSnapshot, JokeListStatus
from jokelist.log_config.logger import ContextualLogger

_log = logging.getLogger(__name__)

DEFAULT_JOKE_COUNT = 5


class JokeListController:
    """State machine behind the joke list page.

    Args:
        source: Where new jokes come from.
        store: Key-value store holding the persisted list.
        requested_count: Default number of jokes a fill aims for.
        max_fetch_attempts: Source calls allowed per fill before giving up
            with :class:`SourceExhaustedError`.
        fill_timeout: Seconds one whole fill may take.
        event_bus: Optional bus notified of status and list changes.
    """

    def __init__(
        self,
        source: JokeSource,
        store: JokeStore,
        requested_count: int = DEFAULT_JOKE_COUNT,
        *,
        max_fetch_attempts: int = 50,
        fill_timeout: float = 60.0,
        event_bus: EventBus | None = None,
    ) -> None:
        if requested_count < 1:
            raise ValueError("requested_count must be at least 1")
        if max_fetch_attempts < 1:
            raise ValueError("max_fetch_attempts must be at least 1")

        self._source = source
        self._store = store
        self._requested_count = requested_count
        self._max_fetch_attempts = max_fetch_attempts
        self._fill_timeout = fill_timeout
        self._bus = event_bus

        self._jokes: list[Joke] = []
        self._status = JokeListStatus.IDLE
        self._error: str | None = None

        self._fill_task: asyncio.Task[list[Joke]] | None = None
        self._cancel_requested = False
        self._closed = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def jokes(self) -> list[Joke]:
        """Jokes in stored order (a copy)."""
        return list(self._jokes)

    @property
    def status(self) -> JokeListStatus:
        return self._status

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def is_loading(self) -> bool:
        return self._status is JokeListStatus.LOADING

    @property
    def is_filling(self) -> bool:
        return self._fill_task is not None

    @property
    def requested_count(self) -> int:
        return self._requested_count

    def sorted_view(self) -> list[Joke]:
        """Return jokes ordered by votes, highest first.

        Ties keep their stored relative order.  Stored order is untouched.
        """
        return sorted(self._jokes, key=lambda j: j.votes, reverse=True)

    def snapshot(self) -> JokeListSnapshot:
        return JokeListSnapshot(
            status=self._status,
            error=self._error,
            jokes=tuple(self.sorted_view()),
        )

    # ------------------------------------------------------------------
    # Fill-driven operations
    # ------------------------------------------------------------------

    async def initialize(self, requested_count: int | None = None) -> bool:
        """Adopt the persisted list, or fill from scratch when there is none.

        Returns ``True`` once the list is loaded.
        """
        if self._reject_busy("initialize"):
            return False

        saved = self._load_saved()
        if saved:
            _log.info("Restored %d saved jokes", len(saved))
            self._jokes = saved
            self._set_status(JokeListStatus.LOADED)
            self._notify_list()
            return True

        return await self._run_fill(self._resolve_count(requested_count), basis=[])

    async def regenerate(self, requested_count: int | None = None) -> bool:
        """Replace every unlocked joke with freshly fetched ones.

        Locked jokes are carried over unchanged, in order, votes included.
        Returns ``True`` when the fill completed.
        """
        if self._reject_busy("regenerate"):
            return False

        basis = [j for j in self._jokes if j.locked]
        return await self._run_fill(self._resolve_count(requested_count), basis=basis)

    async def retry(self) -> bool:
        """Re-run a regeneration after a failure."""
        return await self.regenerate(self._requested_count)

    def cancel_fill(self) -> bool:
        """Cancel the in-flight fill.  Returns ``False`` when none is running."""
        task = self._fill_task
        if task is None or task.done():
            return False
        _log.info("Cancelling in-flight fill")
        self._cancel_requested = True
        task.cancel()
        return True

    async def close(self) -> None:
        """Cancel any in-flight fill and refuse further fills."""
        self._closed = True
        task = self._fill_task
        if self.cancel_fill() and task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        _log.info("Joke list controller closed")

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def vote(self, joke_id: str, delta: int) -> None:
        """Add *delta* (``+1`` or ``-1``) to the votes of *joke_id*."""
        if delta not in (1, -1):
            raise ValueError(f"delta must be +1 or -1, got {delta!r}")
        if self._reject_busy("vote"):
            return
        idx = self._index_of(joke_id)
        if idx is None:
            _log.debug("Vote for unknown joke %s ignored", joke_id)
            return
        joke = self._jokes[idx]
        self._jokes[idx] = joke.model_copy(update={"votes": joke.votes + delta})
        self._notify_list()
        self._persist()

    def toggle_lock(self, joke_id: str) -> None:
        if self._reject_busy("toggle_lock"):
            return
        idx = self._index_of(joke_id)
        if idx is None:
            _log.debug("Lock toggle for unknown joke %s ignored", joke_id)
            return
        joke = self._jokes[idx]
        self._jokes[idx] = joke.model_copy(update={"locked": not joke.locked})
        self._notify_list()
        self._persist()

    def reset_votes(self) -> None:
        """Zero every vote and clear the persisted list (without re-saving)."""
        if self._reject_busy("reset_votes"):
            return
        self._jokes = [j.model_copy(update={"votes": 0}) for j in self._jokes]
        try:
            self._store.clear()
        except PersistenceError as exc:
            _log.warning("Could not clear saved jokes: %s", exc)
        _log.info("Votes reset for %d jokes", len(self._jokes))
        self._notify_list()

    # ------------------------------------------------------------------
    # Fill internals
    # ------------------------------------------------------------------

    async def _run_fill(self, target: int, basis: list[Joke]) -> bool:
        if self._closed:
            _log.warning("Fill requested after close — ignored")
            return False

        self._requested_count = target
        self._cancel_requested = False
        self._set_status(JokeListStatus.LOADING)

        task = asyncio.create_task(self._fill(target, basis), name="joke-fill")
        self._fill_task = task
        try:
            filled = await task
        except asyncio.CancelledError:
            self._set_status(JokeListStatus.LOADED if self._jokes else JokeListStatus.IDLE)
            if not self._cancel_requested:
                raise
            _log.info("Fill cancelled (target=%d)", target)
            return False
        except SourceFetchError as exc:
            _log.error("Fill failed (target=%d): %s", target, exc)
            self._set_status(JokeListStatus.FAILED, str(exc))
            return False
        finally:
            self._fill_task = None
            self._cancel_requested = False

        self._jokes = filled
        self._set_status(JokeListStatus.LOADED)
        self._notify_list()
        self._persist()
        return True

    async def _fill(self, target: int, basis: list[Joke]) -> list[Joke]:
        try:
            return await asyncio.wait_for(
                self._fetch_until(target, basis), timeout=self._fill_timeout
            )
        except asyncio.TimeoutError:
            raise SourceFetchError(
                f"Timed out after {self._fill_timeout:g}s filling {target} jokes"
            ) from None

    async def _fetch_until(self, target: int, basis: list[Joke]) -> list[Joke]:
        log = ContextualLogger(_log, target=target)
        jokes = list(basis)
        seen = {j.id for j in jokes}
        attempts = 0

        while len(jokes) < target:
            if attempts >= self._max_fetch_attempts:
                raise SourceExhaustedError(attempts, len(jokes), target)
            attempts += 1
            joke = await self._fetch_one()
            if joke.id in seen:
                log.debug("Duplicate joke %s discarded", joke.id)
                continue
            seen.add(joke.id)
            jokes.append(joke.model_copy(update={"votes": 0, "locked": False}))

        log.info("Filled %d jokes (%d kept, %d fetch attempts)", len(jokes), len(basis), attempts)
        return jokes

    async def _fetch_one(self) -> Joke:
        try:
            return await asyncio.to_thread(self._source.fetch_random_joke)
        except SourceFetchError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise SourceFetchError(str(exc) or exc.__class__.__name__) from exc

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _reject_busy(self, operation: str) -> bool:
        if self._fill_task is not None:
            _log.warning("%s ignored — a fill is already in flight", operation)
            return True
        return False

    def _resolve_count(self, requested_count: int | None) -> int:
        count = self._requested_count if requested_count is None else requested_count
        if count < 1:
            raise ValueError("requested_count must be at least 1")
        return count

    def _index_of(self, joke_id: str) -> int | None:
        for idx, joke in enumerate(self._jokes):
            if joke.id == joke_id:
                return idx
        return None

    def _load_saved(self) -> list[Joke]:
        try:
            saved = self._store.load()
        except PersistenceError as exc:
            _log.warning("Ignoring unreadable saved jokes: %s", exc)
            return []
        if not saved:
            return []

        unique: list[Joke] = []
        seen: set[str] = set()
        for joke in saved:
            if joke.id in seen:
                continue
            seen.add(joke.id)
            unique.append(joke)
        if len(unique) != len(saved):
            _log.warning("Dropped %d duplicate saved jokes", len(saved) - len(unique))
        return unique

    def _persist(self) -> None:
        try:
            self._store.save(list(self._jokes))
        except PersistenceError as exc:
            _log.warning("Could not save jokes: %s", exc)

    def _set_status(self, status: JokeListStatus, error: str | None = None) -> None:
        self._status = status
        self._error = error if status is JokeListStatus.FAILED else None
        self._publish(
            events.JOKES_STATUS_CHANGED,
            {"status": status.value, "error": self._error},
        )

    def _notify_list(self) -> None:
        self._publish(events.JOKES_LIST_CHANGED, {"count": len(self._jokes)})

    def _publish(self, event_type: str, payload: dict[str, Any]) -> None:
        if self._bus is not None and self._bus.is_running:
            self._bus.publish_nowait(event_type, payload)
