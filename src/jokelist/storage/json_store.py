"""JSON-file key-value store for the joke list.

The file holds one JSON object mapping keys to values, so several
collections could share a file the way browser local storage shares an
origin.  Only the configured key is read or written.  Writes go through a
temp file + rename so a crash never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from jokelist.core.errors import PersistenceError
from jokelist.core.interfaces.collaborators import JokeStore
from jokelist.core.models.joke import Joke

_log = logging.getLogger(__name__)

_JOKE_LIST = TypeAdapter(list[Joke])


class JsonFileJokeStore(JokeStore):
    """Persists the joke list under *key* in the JSON object file at *path*."""

    def __init__(self, path: Path | str, key: str = "jokes") -> None:
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Joke] | None:
        raw = self._read_all()
        value = raw.get(self._key)
        if value is None:
            return None
        try:
            return _JOKE_LIST.validate_python(value)
        except ValidationError as exc:
            raise PersistenceError(f"Corrupt joke list under '{self._key}' in {self._path}") from exc

    def save(self, jokes: list[Joke]) -> None:
        try:
            raw = self._read_all()
        except PersistenceError:
            _log.warning("Overwriting unreadable store file %s", self._path)
            raw = {}
        raw[self._key] = [j.model_dump() for j in jokes]
        self._write_all(raw)

    def clear(self) -> None:
        try:
            raw = self._read_all()
        except PersistenceError:
            _log.warning("Resetting unreadable store file %s", self._path)
            self._write_all({})
            return
        if self._key in raw:
            del raw[self._key]
            self._write_all(raw)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _read_all(self) -> dict[str, Any]:
        if not self._path.is_file():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Cannot read {self._path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise PersistenceError(f"Expected a JSON object in {self._path}")
        return raw

    def _write_all(self, payload: dict[str, Any]) -> None:
        try:
            _atomic_write_json(self._path, payload)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {self._path}: {exc}") from exc


def _atomic_write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with open(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, sort_keys=True)
            handle.write("\n")
        Path(tmp_name).replace(path)
    finally:
        tmp_path = Path(tmp_name)
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
