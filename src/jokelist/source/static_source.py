"""Static offline source — random jokes from a bundled JSON asset.

Picks with replacement, so duplicates come up often and the controller's
dedupe path gets a real workout.
"""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path

from jokelist.core.errors import SourceFetchError
from jokelist.core.interfaces.collaborators import JokeSource
from jokelist.core.models.joke import Joke

_log = logging.getLogger(__name__)

_DEFAULT_ASSET = Path(__file__).resolve().parent / "assets" / "jokes.json"


class StaticJokeSource(JokeSource):
    """Serves jokes from a fixed pool.

    Args:
        jokes: The pool.  When *None*, loaded from the bundled asset.
        rng: Random generator, injectable for deterministic tests.
    """

    def __init__(
        self,
        jokes: list[Joke] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._jokes = list(jokes) if jokes is not None else load_jokes_asset(_DEFAULT_ASSET)
        self._rng = rng or random.Random()

    @property
    def pool_size(self) -> int:
        return len(self._jokes)

    def fetch_random_joke(self) -> Joke:
        if not self._jokes:
            raise SourceFetchError("No static jokes available")
        return self._rng.choice(self._jokes)


def load_jokes_asset(path: Path) -> list[Joke]:
    """Read ``{"jokes": [{"id", "joke"}, …]}`` from *path*."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        _log.error("Failed loading jokes asset %s: %s", path, exc)
        return []

    jokes: list[Joke] = []
    for item in data.get("jokes", []) if isinstance(data, dict) else []:
        if isinstance(item, dict) and item.get("id") and item.get("joke"):
            jokes.append(Joke(id=str(item["id"]), text=str(item["joke"])))
    return jokes
