"""Logging configuration for vigilant."""

from vigilant.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
