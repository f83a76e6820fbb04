"""Shared HTTP helpers for joke sources.

Provides a resilient ``fetch_json`` wrapper around :mod:`requests` with
automatic retry, backoff, and concise error summarisation.
"""

from __future__ import annotations

import time
from typing import Any

import requests

from jokelist import __version__
from jokelist.core.errors import SourceFetchError
from jokelist.source.error_utils import summarize_error

USER_AGENT = f"jokelist/{__version__}"


def fetch_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = 6.0,
    retries: int = 1,
    backoff: float = 1.5,
) -> Any:
    """GET *url* and return parsed JSON.

    Args:
        url: Full URL to fetch.
        params: Query-string parameters.
        headers: Extra HTTP headers (``User-Agent`` and ``Accept`` are
            always set).
        timeout: Per-request timeout in seconds.
        retries: Number of **additional** attempts after the first failure.
        backoff: Multiplier for sleep between retries (``backoff * attempt``).

    Returns:
        Parsed JSON (dict or list).

    Raises:
        SourceFetchError: On exhausted retries or non-JSON responses, with a
            human-readable summary suitable for display.
    """
    hdrs = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if headers:
        hdrs.update(headers)

    last_exc: Exception | None = None
    for attempt in range(1 + retries):
        try:
            resp = requests.get(url, params=params, headers=hdrs, timeout=timeout)
            resp.raise_for_status()
            return resp.json()
        except Exception as exc:  # noqa: BLE001
            last_exc = exc
            if attempt < retries:
                time.sleep(backoff * (attempt + 1))

    assert last_exc is not None
    raise SourceFetchError(summarize_error(last_exc)) from last_exc
