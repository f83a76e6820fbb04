"""Joke source factory — picks the backend from config.

Selects the icanhazdadjoke HTTP source unless ``source.mode`` is
``"static"`` or ``system.dev_mode`` is set, in which case the bundled
offline jokes are served.
"""

from __future__ import annotations

import logging

from jokelist.core.interfaces.collaborators import JokeSource
from jokelist.core.models.config import JokeListConfig

_log = logging.getLogger(__name__)


def create_joke_source(config: JokeListConfig) -> JokeSource:
    """Return the appropriate :class:`JokeSource` for *config*."""
    source = config.source
    if config.system.dev_mode or source.mode == "static":
        from jokelist.source.static_source import StaticJokeSource

        _log.info("Using StaticJokeSource (dev_mode=%s, mode=%s)",
                  config.system.dev_mode, source.mode)
        return StaticJokeSource()

    from jokelist.source.dad_joke_source import DadJokeSource

    _log.info("Using DadJokeSource at %s", source.url)
    return DadJokeSource(
        source.url,
        timeout=source.request_timeout_seconds,
        retries=source.retries,
        backoff=source.backoff,
    )
