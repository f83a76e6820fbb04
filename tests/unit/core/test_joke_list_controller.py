"""Tests for the JokeListController state machine."""

from __future__ import annotations

import asyncio

import pytest

from jokelist.core import events
from jokelist.core.errors import SourceFetchError
from jokelist.core.event_bus import EventBus
from jokelist.core.interfaces.collaborators import JokeSource
from jokelist.core.joke_list import JokeListController
from jokelist.core.models.event import Event
from jokelist.core.models.joke import Joke
from jokelist.core.models.state import JokeListStatus
from jokelist.storage.memory_store import InMemoryJokeStore
from tests.helpers.fake_sources import (
    GatedJokeSource,
    RepeatingJokeSource,
    ScriptedJokeSource,
    make_joke,
)
from tests.helpers.runtime import wait_for


def _ids(jokes: list[Joke]) -> list[str]:
    return [j.id for j in jokes]


async def _loaded(source: JokeSource, jokes: list[Joke], **kwargs) -> JokeListController:
    """Controller initialised from a store pre-seeded with *jokes*."""
    store = InMemoryJokeStore(initial=jokes)
    controller = JokeListController(source, store, **kwargs)
    assert await controller.initialize()
    return controller


# ---------------------------------------------------------------------------
# initialize
# ---------------------------------------------------------------------------


class TestInitialize:
    async def test_restores_saved_list_verbatim(self):
        saved = [make_joke("a", votes=2, locked=True), make_joke("b", votes=-1)]
        source = ScriptedJokeSource([])
        store = InMemoryJokeStore(initial=saved)
        controller = JokeListController(source, store)

        assert await controller.initialize() is True

        assert controller.jokes == saved
        assert controller.status is JokeListStatus.LOADED
        assert controller.is_loading is False
        assert source.calls == 0

    async def test_fills_when_nothing_saved(self, store):
        source = ScriptedJokeSource(["a", "b", "c", "d", "e"])
        controller = JokeListController(source, store)

        assert await controller.initialize() is True

        assert _ids(controller.jokes) == ["a", "b", "c", "d", "e"]
        assert all(j.votes == 0 and not j.locked for j in controller.jokes)
        assert controller.status is JokeListStatus.LOADED
        assert store.saved == controller.jokes

    async def test_default_count_is_five(self, store):
        controller = JokeListController(ScriptedJokeSource(list("abcdefg")), store)
        await controller.initialize()
        assert len(controller.jokes) == 5

    async def test_empty_saved_list_triggers_fill(self):
        store = InMemoryJokeStore(initial=[])
        controller = JokeListController(ScriptedJokeSource(["x", "y"]), store, 2)

        await controller.initialize()

        assert _ids(controller.jokes) == ["x", "y"]

    async def test_unreadable_store_treated_as_absent(self, store):
        store.fail_on_load = True
        controller = JokeListController(ScriptedJokeSource(["a", "b"]), store, 2)

        assert await controller.initialize() is True

        assert _ids(controller.jokes) == ["a", "b"]

    async def test_duplicate_saved_ids_dropped(self):
        saved = [make_joke("a", votes=1), make_joke("b"), make_joke("a", votes=7)]
        controller = await _loaded(ScriptedJokeSource([]), saved)

        assert _ids(controller.jokes) == ["a", "b"]
        assert controller.jokes[0].votes == 1

    def test_rejects_non_positive_count(self, store):
        with pytest.raises(ValueError):
            JokeListController(ScriptedJokeSource([]), store, 0)

    def test_rejects_non_positive_attempt_cap(self, store):
        with pytest.raises(ValueError):
            JokeListController(ScriptedJokeSource([]), store, max_fetch_attempts=0)


# ---------------------------------------------------------------------------
# fill
# ---------------------------------------------------------------------------


class _PreVotedSource(JokeSource):
    def __init__(self) -> None:
        self._n = 0

    def fetch_random_joke(self) -> Joke:
        self._n += 1
        return Joke(id=f"p{self._n}", text="pre-voted", votes=9, locked=True)


class TestFill:
    async def test_duplicates_discarded_in_first_seen_order(self, store):
        source = ScriptedJokeSource(["A", "A", "B", "A", "C"])
        controller = JokeListController(source, store, 3)

        await controller.initialize()

        assert _ids(controller.jokes) == ["A", "B", "C"]
        assert source.calls == 5
        assert source.remaining == 0

    async def test_new_records_start_unvoted_and_unlocked(self, store):
        controller = JokeListController(_PreVotedSource(), store, 2)

        await controller.initialize()

        assert [(j.votes, j.locked) for j in controller.jokes] == [(0, False), (0, False)]

    async def test_exhausted_source_fails_instead_of_looping(self, store):
        source = RepeatingJokeSource("same")
        controller = JokeListController(source, store, 3, max_fetch_attempts=4)

        assert await controller.initialize() is False

        assert source.calls == 4
        assert controller.status is JokeListStatus.FAILED
        assert "exhausted" in controller.error.lower()
        assert controller.jokes == []
        assert store.saved is None

    async def test_source_error_moves_to_failed_not_stuck_loading(self, store):
        source = ScriptedJokeSource(["a", SourceFetchError("HTTP 503 Service Unavailable")])
        controller = JokeListController(source, store, 3)

        assert await controller.initialize() is False

        assert controller.is_loading is False
        assert controller.status is JokeListStatus.FAILED
        assert controller.error == "HTTP 503 Service Unavailable"
        assert controller.jokes == []
        assert store.save_count == 0

    async def test_unexpected_source_exception_is_wrapped(self, store):
        source = ScriptedJokeSource([KeyError("joke")])
        controller = JokeListController(source, store, 1)

        await controller.initialize()

        assert controller.status is JokeListStatus.FAILED
        assert "joke" in controller.error

    async def test_fill_timeout(self, store):
        source = GatedJokeSource(["a"])
        controller = JokeListController(source, store, 1, fill_timeout=0.05)
        try:
            assert await controller.initialize() is False
            assert controller.status is JokeListStatus.FAILED
            assert "Timed out" in controller.error
        finally:
            source.release()

    async def test_retry_after_failure_recovers(self, store):
        source = ScriptedJokeSource([SourceFetchError("Read timeout")])
        controller = JokeListController(source, store, 2)
        await controller.initialize()
        assert controller.status is JokeListStatus.FAILED

        source.extend(["a", "b"])
        assert await controller.retry() is True

        assert controller.status is JokeListStatus.LOADED
        assert controller.error is None
        assert _ids(controller.jokes) == ["a", "b"]
        assert _ids(store.saved) == ["a", "b"]


# ---------------------------------------------------------------------------
# vote / toggle_lock
# ---------------------------------------------------------------------------


class TestVote:
    async def test_up_then_down_restores_votes(self):
        controller = await _loaded(
            ScriptedJokeSource([]), [make_joke("a", votes=3), make_joke("b", votes=1)]
        )

        controller.vote("a", 1)
        assert controller.jokes[0].votes == 4
        controller.vote("a", -1)

        assert [j.votes for j in controller.jokes] == [3, 1]

    async def test_vote_persists(self):
        store = InMemoryJokeStore(initial=[make_joke("a")])
        controller = JokeListController(ScriptedJokeSource([]), store)
        await controller.initialize()

        controller.vote("a", 1)

        assert store.saved[0].votes == 1
        assert store.save_count == 1

    async def test_votes_may_go_negative(self):
        controller = await _loaded(ScriptedJokeSource([]), [make_joke("a")])

        controller.vote("a", -1)
        controller.vote("a", -1)

        assert controller.jokes[0].votes == -2

    async def test_unknown_id_is_ignored(self):
        store = InMemoryJokeStore(initial=[make_joke("a")])
        controller = JokeListController(ScriptedJokeSource([]), store)
        await controller.initialize()

        controller.vote("missing", 1)

        assert controller.jokes[0].votes == 0
        assert store.save_count == 0

    async def test_invalid_delta_rejected(self):
        controller = await _loaded(ScriptedJokeSource([]), [make_joke("a")])
        with pytest.raises(ValueError):
            controller.vote("a", 2)

    async def test_save_failure_does_not_break_voting(self):
        store = InMemoryJokeStore(initial=[make_joke("a")])
        controller = JokeListController(ScriptedJokeSource([]), store)
        await controller.initialize()
        store.fail_on_save = True

        controller.vote("a", 1)

        assert controller.jokes[0].votes == 1


class TestToggleLock:
    async def test_toggle_flips_and_persists(self):
        store = InMemoryJokeStore(initial=[make_joke("a"), make_joke("b")])
        controller = JokeListController(ScriptedJokeSource([]), store)
        await controller.initialize()

        controller.toggle_lock("b")
        assert [j.locked for j in controller.jokes] == [False, True]
        assert store.saved[1].locked is True

        controller.toggle_lock("b")
        assert controller.jokes[1].locked is False

    async def test_unknown_id_is_ignored(self):
        store = InMemoryJokeStore(initial=[make_joke("a")])
        controller = JokeListController(ScriptedJokeSource([]), store)
        await controller.initialize()

        controller.toggle_lock("missing")

        assert controller.jokes[0].locked is False
        assert store.save_count == 0


# ---------------------------------------------------------------------------
# reset_votes
# ---------------------------------------------------------------------------


class TestResetVotes:
    async def test_zeroes_votes_and_keeps_locks_and_order(self):
        controller = await _loaded(
            ScriptedJokeSource([]),
            [make_joke("a", votes=4, locked=True), make_joke("b", votes=-2)],
        )

        controller.reset_votes()

        assert [(j.id, j.votes, j.locked) for j in controller.jokes] == [
            ("a", 0, True),
            ("b", 0, False),
        ]

    async def test_clears_store_without_resaving(self):
        store = InMemoryJokeStore(initial=[make_joke("a", votes=4), make_joke("b")])
        controller = JokeListController(ScriptedJokeSource([]), store)
        await controller.initialize()

        controller.reset_votes()

        assert store.saved is None
        assert store.clear_count == 1
        assert store.save_count == 0

    async def test_reload_after_reset_fetches_fresh_list(self):
        store = InMemoryJokeStore(initial=[make_joke("a", votes=4), make_joke("b")])
        first = JokeListController(ScriptedJokeSource([]), store, 2)
        await first.initialize()
        first.reset_votes()

        source = ScriptedJokeSource(["x", "y"])
        reloaded = JokeListController(source, store, 2)
        await reloaded.initialize()

        assert _ids(reloaded.jokes) == ["x", "y"]
        assert source.calls == 2


# ---------------------------------------------------------------------------
# regenerate
# ---------------------------------------------------------------------------


class TestRegenerate:
    async def test_keeps_locked_and_replaces_unlocked(self):
        locked = make_joke("1", votes=5, locked=True)
        controller = await _loaded(
            ScriptedJokeSource(["3", "4"]), [locked, make_joke("2", votes=2)]
        )

        assert await controller.regenerate(3) is True

        jokes = controller.jokes
        assert _ids(jokes) == ["1", "3", "4"]
        assert jokes[0] == locked
        assert [(j.votes, j.locked) for j in jokes[1:]] == [(0, False), (0, False)]
        assert controller.status is JokeListStatus.LOADED

    async def test_merged_list_is_persisted(self):
        store = InMemoryJokeStore(initial=[make_joke("1", locked=True), make_joke("2")])
        controller = JokeListController(ScriptedJokeSource(["3"]), store)
        await controller.initialize()

        await controller.regenerate(2)

        assert _ids(store.saved) == ["1", "3"]

    async def test_refetched_locked_id_is_deduped(self):
        controller = await _loaded(
            ScriptedJokeSource(["1", "5", "6"]), [make_joke("1", votes=5, locked=True)]
        )

        await controller.regenerate(3)

        assert _ids(controller.jokes) == ["1", "5", "6"]
        assert controller.jokes[0].votes == 5

    async def test_unlocked_joke_may_come_back_fresh(self):
        controller = await _loaded(ScriptedJokeSource(["2"]), [make_joke("2", votes=7)])

        await controller.regenerate(1)

        assert controller.jokes == [make_joke("2")]

    async def test_more_locked_than_requested_keeps_all_locked(self):
        locked = [make_joke(i, locked=True) for i in ("a", "b", "c")]
        source = ScriptedJokeSource([])
        controller = await _loaded(source, locked)

        assert await controller.regenerate(2) is True

        assert _ids(controller.jokes) == ["a", "b", "c"]
        assert source.calls == 0

    async def test_failure_leaves_list_unchanged(self):
        before = [make_joke("1", locked=True), make_joke("2", votes=3)]
        controller = await _loaded(ScriptedJokeSource([SourceFetchError("DNS failure")]), before)

        assert await controller.regenerate(2) is False

        assert controller.jokes == before
        assert controller.status is JokeListStatus.FAILED
        assert controller.error == "DNS failure"

    async def test_is_loading_during_fill(self, store):
        source = GatedJokeSource(["a"])
        controller = JokeListController(source, store, 1)
        task = asyncio.create_task(controller.regenerate())
        try:
            await wait_for(source.started.is_set)
            assert controller.is_loading is True
            assert controller.is_filling is True
        finally:
            source.release()
        assert await task is True
        assert controller.is_loading is False

    async def test_concurrent_regenerate_is_ignored(self, store):
        source = GatedJokeSource(["a", "b"])
        controller = JokeListController(source, store, 1)
        task = asyncio.create_task(controller.regenerate())
        try:
            await wait_for(source.started.is_set)
            assert await controller.regenerate() is False
            assert await controller.initialize() is False
        finally:
            source.release()

        assert await task is True
        assert _ids(controller.jokes) == ["a"]

    async def test_mutations_during_fill_are_ignored(self):
        store = InMemoryJokeStore(
            initial=[make_joke("a", votes=5, locked=True), make_joke("b", votes=1)]
        )
        source = GatedJokeSource(["c"])
        controller = JokeListController(source, store, 2)
        assert await controller.initialize()
        saves_before = store.save_count

        task = asyncio.create_task(controller.regenerate())
        try:
            await wait_for(source.started.is_set)
            controller.vote("a", 1)
            controller.toggle_lock("a")
            controller.reset_votes()
            assert store.save_count == saves_before
            assert store.clear_count == 0
        finally:
            source.release()

        assert await task is True
        jokes = controller.jokes
        assert _ids(jokes) == ["a", "c"]
        assert (jokes[0].votes, jokes[0].locked) == (5, True)
        assert [(j.id, j.votes) for j in store.saved] == [("a", 5), ("c", 0)]

    async def test_mutations_resume_after_fill(self, store):
        source = GatedJokeSource(["a"])
        controller = JokeListController(source, store, 1)
        task = asyncio.create_task(controller.initialize())
        await wait_for(source.started.is_set)
        source.release()
        assert await task is True

        controller.vote("a", 1)

        assert controller.jokes[0].votes == 1
        assert store.saved[0].votes == 1

    async def test_rejects_non_positive_count(self):
        controller = await _loaded(ScriptedJokeSource([]), [make_joke("a")])
        with pytest.raises(ValueError):
            await controller.regenerate(0)


# ---------------------------------------------------------------------------
# cancellation
# ---------------------------------------------------------------------------


class TestCancellation:
    async def test_cancel_fill_leaves_state_untouched(self):
        before = [make_joke("a", votes=2)]
        source = GatedJokeSource(["b"])
        controller = await _loaded(source, before, requested_count=1)
        task = asyncio.create_task(controller.regenerate())
        try:
            await wait_for(source.started.is_set)
            assert controller.cancel_fill() is True
            assert await task is False
        finally:
            source.release()

        assert controller.jokes == before
        assert controller.status is JokeListStatus.LOADED
        assert controller.is_filling is False

    async def test_cancel_without_fill_returns_false(self, store):
        controller = JokeListController(ScriptedJokeSource([]), store)
        assert controller.cancel_fill() is False

    async def test_close_cancels_and_blocks_further_fills(self, store):
        source = GatedJokeSource(["a"])
        controller = JokeListController(source, store, 1)
        task = asyncio.create_task(controller.initialize())
        try:
            await wait_for(source.started.is_set)
            await controller.close()
            assert await task is False
        finally:
            source.release()

        assert controller.status is JokeListStatus.IDLE
        assert await controller.regenerate() is False
        assert store.saved is None


# ---------------------------------------------------------------------------
# sorted view / snapshot
# ---------------------------------------------------------------------------


class TestSortedView:
    async def test_descending_with_stable_ties(self):
        controller = await _loaded(
            ScriptedJokeSource([]),
            [make_joke("a", 3), make_joke("b", -1), make_joke("c", 3), make_joke("d", 0)],
        )

        assert _ids(controller.sorted_view()) == ["a", "c", "d", "b"]

    async def test_idempotent_and_non_mutating(self):
        controller = await _loaded(
            ScriptedJokeSource([]), [make_joke("a", 0), make_joke("b", 5), make_joke("c", 1)]
        )

        first = controller.sorted_view()
        second = controller.sorted_view()

        assert first == second
        assert _ids(controller.jokes) == ["a", "b", "c"]

    async def test_snapshot_carries_status_and_sorted_jokes(self):
        controller = await _loaded(
            ScriptedJokeSource([]), [make_joke("a", 0), make_joke("b", 5)]
        )

        snap = controller.snapshot()

        assert snap.status is JokeListStatus.LOADED
        assert snap.error is None
        assert [j.id for j in snap.jokes] == ["b", "a"]
        assert snap.is_loading is False


# ---------------------------------------------------------------------------
# events
# ---------------------------------------------------------------------------


class TestEvents:
    async def test_status_transitions_published(self, event_bus: EventBus, store):
        statuses: list[str] = []

        async def handler(event: Event):
            statuses.append(event.payload["status"])

        event_bus.subscribe(events.JOKES_STATUS_CHANGED, handler)
        controller = JokeListController(
            ScriptedJokeSource(["a"]), store, 1, event_bus=event_bus
        )

        await controller.initialize()
        await wait_for(lambda: len(statuses) >= 2)

        assert statuses == ["loading", "loaded"]

    async def test_failure_reason_published(self, event_bus: EventBus, store):
        received: list[Event] = []
        event_bus.subscribe(events.JOKES_STATUS_CHANGED, received.append)
        controller = JokeListController(
            ScriptedJokeSource([SourceFetchError("Read timeout")]), store, 1, event_bus=event_bus
        )

        await controller.initialize()
        await wait_for(lambda: len(received) == 2)

        assert received[-1].payload == {"status": "failed", "error": "Read timeout"}

    async def test_vote_publishes_list_change(self, event_bus: EventBus):
        received: list[Event] = []
        event_bus.subscribe(events.JOKES_LIST_CHANGED, received.append)
        store = InMemoryJokeStore(initial=[make_joke("a")])
        controller = JokeListController(ScriptedJokeSource([]), store, event_bus=event_bus)
        await controller.initialize()

        controller.vote("a", 1)
        await wait_for(lambda: len(received) == 2)

        assert received[-1].payload == {"count": 1}

    async def test_no_bus_started_is_tolerated(self, store):
        controller = JokeListController(
            ScriptedJokeSource(["a"]), store, 1, event_bus=EventBus()
        )
        assert await controller.initialize() is True
