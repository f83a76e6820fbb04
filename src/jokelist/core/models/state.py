"""Controller state models and enumerations."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from jokelist.core.models.joke import Joke


class JokeListStatus(str, Enum):
    """Lifecycle status of the joke list controller."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class JokeListSnapshot(BaseModel):
    """Read-only view of the controller handed to the presentation layer.

    ``jokes`` is already sorted by votes, highest first.
    """

    model_config = ConfigDict(frozen=True)

    status: JokeListStatus = Field(default=JokeListStatus.IDLE)
    error: str | None = Field(default=None, description="Failure reason when FAILED")
    jokes: tuple[Joke, ...] = Field(default=())

    @property
    def is_loading(self) -> bool:
        return self.status is JokeListStatus.LOADING
