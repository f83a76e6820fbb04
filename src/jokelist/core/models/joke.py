"""The joke record — the unit entity of the list."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Joke(BaseModel):
    """One joke with its vote counter and lock flag.

    ``votes`` is deliberately unbounded in both directions.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(min_length=1, description="Externally assigned joke id")
    text: str = Field(description="Joke text as displayed")
    votes: int = Field(default=0, description="Net up/down votes")
    locked: bool = Field(default=False, description="Kept across regeneration")
