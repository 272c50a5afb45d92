"""Telemetry module."""

from .logger import RequestContext, get_logger, setup_logging

__all__ = ["RequestContext", "get_logger", "setup_logging"]
