"""icanhazdadjoke.com source — one random dad joke per GET."""

from __future__ import annotations

import logging
from typing import Any

from jokelist.core.errors import SourceFetchError
from jokelist.core.interfaces.collaborators import JokeSource
from jokelist.core.models.joke import Joke
from jokelist.source.http_helpers import fetch_json

_log = logging.getLogger(__name__)

API_URL = "https://icanhazdadjoke.com/"


class DadJokeSource(JokeSource):
    """Fetches random jokes from the icanhazdadjoke JSON API.

    The API answers ``{"id": ..., "joke": ..., "status": 200}`` when asked
    with ``Accept: application/json``.
    """

    def __init__(
        self,
        url: str = API_URL,
        *,
        timeout: float = 6.0,
        retries: int = 1,
        backoff: float = 1.5,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff

    def fetch_random_joke(self) -> Joke:
        data = fetch_json(
            self._url,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
            retries=self._retries,
            backoff=self._backoff,
        )
        return _parse_joke(data)


def _parse_joke(data: Any) -> Joke:
    if not isinstance(data, dict):
        raise SourceFetchError("Malformed joke payload")
    joke_id = str(data.get("id") or "").strip()
    text = str(data.get("joke") or "").strip()
    if not joke_id or not text:
        _log.debug("Rejecting joke payload %r", data)
        raise SourceFetchError("Malformed joke payload")
    return Joke(id=joke_id, text=text)
