"""Configuration: config manager and the default JSON file."""

from jokelist.config.config_manager import load_config

__all__ = [
    "load_config",
]
