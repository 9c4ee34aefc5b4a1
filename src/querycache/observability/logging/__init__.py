"""Observability – structured logging helpers."""
from querycache.observability.logging.factory import configure_logging
from querycache.observability.logging.processors import get_logger

__all__ = ["configure_logging", "get_logger"]
