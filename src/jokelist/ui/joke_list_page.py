"""Joke list page — single-page NiceGUI application.

Provides the ``@ui.page('/')`` route with:
* Dark theme
* Loading view (spinner only)
* Loaded view ("Get New Jokes" / "Reset Votes" plus one row per joke,
  highest votes first)
* Failed view (reason + "Retry")

Each connected client gets its own container.  All containers are rebuilt
from a fresh controller snapshot whenever the event bus reports a change.
"""

from __future__ import annotations

import logging as _logging
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING

from nicegui import ui

from jokelist.core import events
from jokelist.core.models.event import Event
from jokelist.core.models.joke import Joke
from jokelist.core.models.state import JokeListSnapshot, JokeListStatus

if TYPE_CHECKING:
    from jokelist.core.event_bus import EventBus
    from jokelist.core.joke_list import JokeListController

_log = _logging.getLogger(__name__)

_PAGE_WIDTH = 760


class ViewMode(str, Enum):
    """Which of the three views the page shows."""

    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


def view_mode(status: JokeListStatus) -> ViewMode:
    """Map controller status to a view.  ``IDLE`` renders as an empty list."""
    if status is JokeListStatus.LOADING:
        return ViewMode.LOADING
    if status is JokeListStatus.FAILED:
        return ViewMode.FAILED
    return ViewMode.LOADED


def lock_icon(locked: bool) -> str:
    return "lock" if locked else "lock_open"


class JokeListPage:
    """Builds the ``/`` route and keeps every open page in sync.

    Args:
        controller: The joke list controller driving the page.
        event_bus: The global event bus for subscribing to state changes.
    """

    def __init__(
        self,
        controller: "JokeListController",
        event_bus: "EventBus",
    ) -> None:
        self._controller = controller
        self._bus = event_bus
        self._containers: set[ui.element] = set()
        self._subscribed = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def setup_page(self) -> None:
        """Register the ``@ui.page('/')`` route."""

        @ui.page("/")
        def index():
            self._build_page()

    def subscribe(self) -> None:
        """Listen for controller changes.  Call once the bus has started."""
        if self._subscribed:
            return
        self._bus.subscribe(events.JOKES_STATUS_CHANGED, self._on_state_changed)
        self._bus.subscribe(events.JOKES_LIST_CHANGED, self._on_state_changed)
        self._subscribed = True

    # ------------------------------------------------------------------
    # Page construction
    # ------------------------------------------------------------------

    def _build_page(self) -> None:
        ui.dark_mode().enable()
        ui.query("body").style("background: #1a1a1a; margin: 0; padding: 0;")

        with ui.column().classes("w-full items-center").style(
            f"min-height: 100vh; padding: 16px; gap: 16px; max-width: {_PAGE_WIDTH}px; margin: auto;"
        ):
            ui.label("Dad Jokes").style(
                "font-size: 28px; font-weight: bold; color: #ffffff;"
            )
            with ui.column().classes("w-full items-stretch").style("gap: 8px;") as container:
                pass  # Content rendered by _render

        self._containers.add(container)
        ui.context.client.on_disconnect(lambda: self._containers.discard(container))
        self._render(container, self._controller.snapshot())

    def _render(self, container: ui.element, snapshot: JokeListSnapshot) -> None:
        container.clear()
        with container:
            mode = view_mode(snapshot.status)
            if mode is ViewMode.LOADING:
                with ui.row().classes("w-full justify-center"):
                    ui.spinner(size="4em")
            elif mode is ViewMode.FAILED:
                self._build_failed(snapshot.error)
            else:
                self._build_loaded(snapshot.jokes)

    def _build_failed(self, error: str | None) -> None:
        with ui.card().classes("w-full").style("background: #2a2a2a;"):
            ui.label("Could not load jokes").style(
                "font-size: 18px; font-weight: bold; color: #ff6666;"
            )
            ui.label(error or "Unknown error").style("color: #cccccc;")
            ui.button("Retry", icon="refresh", on_click=self._on_retry)

    def _build_loaded(self, jokes: tuple[Joke, ...]) -> None:
        with ui.row().classes("w-full justify-center").style("gap: 12px;"):
            ui.button("Get New Jokes", icon="autorenew", on_click=self._on_get_more)
            ui.button("Reset Votes", icon="restart_alt", on_click=self._on_reset).props("outline")

        if not jokes:
            ui.label("No jokes yet.").style("color: #888888; text-align: center;")
            return

        for joke in jokes:
            self._build_row(joke)

    def _build_row(self, joke: Joke) -> None:
        with ui.card().classes("w-full").style("background: #2a2a2a; padding: 8px 12px;"):
            with ui.row().classes("w-full items-center no-wrap").style("gap: 8px;"):
                ui.button(icon="thumb_up", on_click=partial(self._controller.vote, joke.id, 1)).props(
                    "flat round dense"
                )
                ui.button(icon="thumb_down", on_click=partial(self._controller.vote, joke.id, -1)).props(
                    "flat round dense"
                )
                ui.label(str(joke.votes)).style(
                    "min-width: 32px; text-align: center; font-weight: bold; color: #ffffff;"
                )
                ui.button(
                    icon=lock_icon(joke.locked),
                    on_click=partial(self._controller.toggle_lock, joke.id),
                ).props("flat round dense" + (" color=amber" if joke.locked else ""))
                ui.label(joke.text).style("color: #eeeeee; white-space: normal;")

    # ------------------------------------------------------------------
    # Gesture handlers
    # ------------------------------------------------------------------

    async def _on_get_more(self) -> None:
        await self._controller.regenerate()

    async def _on_retry(self) -> None:
        await self._controller.retry()

    def _on_reset(self) -> None:
        self._controller.reset_votes()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def _on_state_changed(self, _event: Event) -> None:
        snapshot = self._controller.snapshot()
        for container in list(self._containers):
            try:
                self._render(container, snapshot)
            except RuntimeError:
                # Client already gone
                self._containers.discard(container)
