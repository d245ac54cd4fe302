"""Telemetry and observability helpers.

This package emits deterministic request, cache, and job logs.
"""

from .logger import RequestLogger, configure_cli_logging

__all__ = ["RequestLogger", "configure_cli_logging"]
