"""Store factory — picks the persistence backend from config."""

from __future__ import annotations

import logging

from jokelist.core.interfaces.collaborators import JokeStore
from jokelist.core.models.config import JokeListConfig

_log = logging.getLogger(__name__)


def create_joke_store(config: JokeListConfig) -> JokeStore:
    """Return the :class:`JokeStore` selected by ``storage.backend``.

    * ``"file"`` → :class:`JsonFileJokeStore` at ``storage.path``.
    * ``"memory"`` → :class:`InMemoryJokeStore` (nothing survives a restart).
    """
    storage = config.storage
    if storage.backend == "memory":
        from jokelist.storage.memory_store import InMemoryJokeStore

        _log.info("Using InMemoryJokeStore (key=%s)", storage.key)
        return InMemoryJokeStore(key=storage.key)

    from jokelist.storage.json_store import JsonFileJokeStore

    _log.info("Using JsonFileJokeStore at %s (key=%s)", storage.path, storage.key)
    return JsonFileJokeStore(storage.path, key=storage.key)
