"""Logging setup and contextual logger."""

from jokelist.log_config.logger import ContextualLogger, setup_logging

__all__ = ["setup_logging", "ContextualLogger"]
