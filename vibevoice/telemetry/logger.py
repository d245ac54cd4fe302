"""Structured request logging utilities.

Responsibilities:
- Emit concise, deterministic operation-level logs through `loguru`.
- Keep API keys and synthesized text out of log lines.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


_PACKAGE_NAME = "vibevoice"


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


def configure_cli_logging(sink: TextIO | None = None, level: str = "INFO") -> int:
    """Route package logs to a sink with plain message formatting.

    Returns:
        The loguru handler id, usable with `logger.remove`.
    """

    _loguru_logger.remove()
    _loguru_logger.enable(_PACKAGE_NAME)
    return _loguru_logger.add(
        sink or sys.stderr,
        format="{message}",
        level=level,
        colorize=False,
    )


class RequestLogger:
    """Emit deterministic operation logs for client and job activity."""

    def _emit(self, level: str, event: str, operation: str, **context: object) -> None:
        """Emit one structured log line."""

        line = (
            f"[vibevoice] level={level} op={operation} event={event}"
            f"{_format_context(context)}"
        )
        _loguru_logger.log(level, line)

    def request_start(self, operation: str, method: str, path: str) -> None:
        """Log an outgoing HTTP request."""

        self._emit("DEBUG", "request", operation, method=method, path=path)

    def request_complete(self, operation: str, status_code: int) -> None:
        """Log a completed HTTP request."""

        self._emit("DEBUG", "response", operation, status=status_code)

    def request_failure(self, operation: str, error_type: str, code: int) -> None:
        """Log a classified failure without payload details."""

        self._emit("WARNING", "failure", operation, error_type=error_type, code=code)

    def cache_hit(self, key: str) -> None:
        """Log a voice catalog cache hit."""

        self._emit("DEBUG", "cache_hit", "voices", key=key)

    def cache_store(self, key: str, ttl_seconds: int, count: int) -> None:
        """Log a voice catalog cache population."""

        self._emit("DEBUG", "cache_store", "voices", key=key, ttl=ttl_seconds, count=count)

    def stream_closed(self, chunks: int, total_bytes: int, completed: bool) -> None:
        """Log the release of a streaming response."""

        self._emit(
            "DEBUG",
            "stream_closed",
            "stream",
            chunks=chunks,
            bytes=total_bytes,
            completed="true" if completed else "false",
        )

    def audio_saved(self, path: str, size_bytes: int) -> None:
        """Log a persisted audio file."""

        self._emit("INFO", "saved", "save_audio", path=path, bytes=size_bytes)

    def job_event(self, event: str, **context: object) -> None:
        """Log an asynchronous job lifecycle event."""

        level = "ERROR" if event == "failed" else "INFO"
        self._emit(level, event, "job", **context)
