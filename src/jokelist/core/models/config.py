"""Configuration Pydantic models: JokeListConfig and its sections."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class JokesConfig(BaseModel):
    """How many jokes to show and how hard to try fetching them."""

    model_config = ConfigDict(extra="forbid")

    count: int = Field(default=5, ge=1, description="Requested number of jokes in the list")
    max_fetch_attempts: int = Field(
        default=50, ge=1, description="Source calls allowed per fill before giving up"
    )
    fill_timeout_seconds: float = Field(
        default=60.0, gt=0, description="Wall-clock limit for one fill cycle"
    )

    @model_validator(mode="after")
    def _attempts_cover_count(self) -> "JokesConfig":
        if self.max_fetch_attempts < self.count:
            raise ValueError(
                f"max_fetch_attempts ({self.max_fetch_attempts}) must be at least count ({self.count})"
            )
        return self


class SourceConfig(BaseModel):
    """Where jokes come from.

    ``mode="static"`` serves the bundled offline jokes, useful when the
    machine has no network access.
    """

    model_config = ConfigDict(extra="forbid")

    mode: Literal["http", "static"] = Field(default="http", description="Joke source backend")
    url: str = Field(default="https://icanhazdadjoke.com/", description="Random joke endpoint")
    request_timeout_seconds: float = Field(default=6.0, gt=0, description="Per-request timeout")
    retries: int = Field(default=1, ge=0, description="Extra attempts after a failed request")
    backoff: float = Field(default=1.5, ge=0, description="Retry sleep multiplier")


class StorageConfig(BaseModel):
    """Key-value store holding the persisted joke list."""

    model_config = ConfigDict(extra="forbid")

    backend: Literal["file", "memory"] = Field(default="file", description="Store backend")
    path: str = Field(default="data/jokes.json", description="JSON file for the file backend")
    key: str = Field(default="jokes", min_length=1, description="Collection key")


class SystemConfig(BaseModel):
    """Non-domain runtime settings."""

    model_config = ConfigDict(extra="forbid")

    log_level: str = Field(default="INFO", description="Root log level")
    log_dir: str = Field(default="logs", description="Directory for rotating log files")
    event_bus_queue_size: int = Field(default=1000, description="Max queued events")
    webui_port: int = Field(default=8080, description="NiceGUI listen port")
    dev_mode: bool = Field(default=False, description="Force the offline joke source")


class JokeListConfig(BaseModel):
    """Top-level configuration loaded from ``jokelist_config.json``."""

    model_config = ConfigDict(extra="forbid")

    jokes: JokesConfig = Field(default_factory=JokesConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)
