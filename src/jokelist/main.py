"""Joke List — Application entry point (NiceGUI composition root).

Wires together: Config → Logging → EventBus → Store + Source → Controller → UI.
NiceGUI owns the event loop; ``app.on_startup`` / ``app.on_shutdown``
handle lifecycle.
"""

from __future__ import annotations

import logging

from nicegui import app, background_tasks, ui

from jokelist.config.config_manager import load_config
from jokelist.core.event_bus import EventBus
from jokelist.core.joke_list import JokeListController
from jokelist.log_config.logger import setup_logging
from jokelist.source.factory import create_joke_source
from jokelist.storage.factory import create_joke_store
from jokelist.ui.joke_list_page import JokeListPage

_log = logging.getLogger(__name__)


def main() -> None:
    """Synchronous entry point — bootstraps and starts NiceGUI."""

    setup_logging()

    # 1. Load configuration, then re-init logging with its settings
    config = load_config()
    setup_logging(config.system.log_level, config.system.log_dir)
    _log.info("Starting Joke List")

    # 2. Create event bus
    bus = EventBus(queue_size=config.system.event_bus_queue_size)

    # 3. Collaborators (offline source in dev mode)
    store = create_joke_store(config)
    source = create_joke_source(config)

    # 4. Controller
    controller = JokeListController(
        source,
        store,
        config.jokes.count,
        max_fetch_attempts=config.jokes.max_fetch_attempts,
        fill_timeout=config.jokes.fill_timeout_seconds,
        event_bus=bus,
    )

    # 5. UI
    page = JokeListPage(controller=controller, event_bus=bus)
    page.setup_page()

    # 6. Wire lifecycle hooks
    async def on_startup() -> None:
        await bus.start()
        page.subscribe()
        # Initial fill may take several round-trips; don't block startup.
        background_tasks.create(controller.initialize(), name="joke-list-initialize")
        _log.info("Joke List running on http://localhost:%d", config.system.webui_port)

    async def on_shutdown() -> None:
        _log.info("NiceGUI shutdown — stopping Joke List")
        await controller.close()
        await bus.stop()
        _log.info("Joke List stopped")

    app.on_startup(on_startup)
    app.on_shutdown(on_shutdown)

    # 7. Launch NiceGUI (blocks forever)
    ui.run(
        port=config.system.webui_port,
        title="Joke List",
        reload=False,
        show=False,
    )


if __name__ == "__main__":
    main()
