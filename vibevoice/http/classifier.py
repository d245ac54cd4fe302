"""Classification of transport and HTTP failures into typed VibeVoice errors.

Responsibilities:
- Distinguish timeout, refused, and generic transport failures by exception type.
- Map HTTP error statuses and bodies onto the typed error taxonomy.
- Keep `requests` exception types from leaking to callers.
"""

from __future__ import annotations

import errno
import re
from typing import Any, Iterator

import requests

from ..errors import (
    AuthenticationError,
    GenerationError,
    GenericServiceError,
    RateLimitError,
    ServiceConnectionError,
    VibeVoiceError,
)
from ..parsing import optional_int


_MAX_REASON_CHARS = 180


def iter_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield an exception and every exception linked from it.

    Links followed are `__cause__`, `__context__`, a `reason` attribute (as set by
    urllib3 retry errors), and exception instances stored in `args`.
    """

    pending: list[BaseException] = [exc]
    seen: set[int] = set()
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        linked: list[object] = [
            current.__cause__,
            current.__context__,
            getattr(current, "reason", None),
            *current.args,
        ]
        pending.extend(item for item in linked if isinstance(item, BaseException))


def _is_connection_refused(exc: BaseException) -> bool:
    """Return whether a refused-connection OS error appears in the exception chain."""

    for item in iter_exception_chain(exc):
        if isinstance(item, ConnectionRefusedError):
            return True
        if isinstance(item, OSError) and item.errno == errno.ECONNREFUSED:
            return True
    return False


def _has_socket_timeout(exc: BaseException) -> bool:
    """Return whether a socket-level timeout appears in the exception chain."""

    return any(isinstance(item, TimeoutError) for item in iter_exception_chain(exc))


def _short_reason(text: str) -> str:
    """Normalize whitespace, redact bearer tokens, and cap reason length."""

    compact = " ".join(text.split())
    compact = re.sub(
        r"(?i)bearer\s+[A-Za-z0-9._-]{8,}",
        "Bearer [redacted-token]",
        compact,
    )
    if len(compact) <= _MAX_REASON_CHARS:
        return compact
    return f"{compact[: _MAX_REASON_CHARS - 3]}..."


def classify_transport_failure(
    exc: BaseException,
    *,
    url: str,
    connect_timeout_seconds: float,
    read_timeout_seconds: float,
) -> ServiceConnectionError:
    """Map a transport-level failure to a `ServiceConnectionError` variant."""

    if isinstance(exc, requests.ConnectTimeout):
        return ServiceConnectionError.timeout(url, connect_timeout_seconds)
    if isinstance(exc, requests.Timeout):
        return ServiceConnectionError.timeout(url, read_timeout_seconds)
    if _is_connection_refused(exc):
        return ServiceConnectionError.refused(url)
    if _has_socket_timeout(exc):
        return ServiceConnectionError.timeout(url, read_timeout_seconds)
    return ServiceConnectionError.failed(url, _short_reason(str(exc)))


def decode_error_body(response: requests.Response) -> dict[str, Any]:
    """Decode an error response body into a mapping, or `{}` when not a JSON object."""

    try:
        payload = response.json()
    except (ValueError, requests.RequestException):
        return {}
    if not isinstance(payload, dict):
        return {}
    return payload


def _extract_message(body: dict[str, Any], fallback: str) -> str:
    """Pick the server message from `message`, then `detail`, then the fallback text."""

    for key in ("message", "detail"):
        value = body.get(key)
        if value is not None:
            return value if isinstance(value, str) else str(value)
    return fallback


def classify_http_failure(exc: requests.HTTPError, *, url: str) -> VibeVoiceError:
    """Map an HTTP error status onto the typed error taxonomy.

    A failure without a response object is treated as a transport failure.
    """

    response = exc.response
    if response is None:
        return ServiceConnectionError.failed(url, _short_reason(str(exc)))

    status_code = response.status_code
    body = decode_error_body(response)
    message = _extract_message(body, str(exc))

    if status_code == 401:
        return AuthenticationError.invalid_api_key()
    if status_code == 429:
        return RateLimitError.exceeded(optional_int(body.get("retry_after")))
    if status_code == 400:
        return GenerationError.failed(message)
    return GenericServiceError(message, status_code, context={"status": status_code})
