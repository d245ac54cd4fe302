"""Typed exception taxonomy for VibeVoice client failures.

Responsibilities:
- Give every failure a ready-to-display message, a numeric code, and a context map.
- Provide named constructors for each failure variant so call sites stay uniform.

Key types:
- `VibeVoiceError`: base class for all client errors.
- `ValidationError`: input rejected before any network call.
- `ServiceConnectionError`: server unreachable (timeout, refused, generic).
- `AuthenticationError`, `RateLimitError`, `GenerationError`, `GenericServiceError`:
  classified HTTP failures.
"""

from __future__ import annotations

from typing import Any


class VibeVoiceError(RuntimeError):
    """Base error carrying a message, a numeric code, and machine-readable context."""

    def __init__(
        self,
        message: str = "",
        code: int = 0,
        *,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize error message, code, and context metadata."""

        super().__init__(message)
        self.message = message
        self.code = code
        self.context: dict[str, Any] = dict(context) if context else {}

    @property
    def cause(self) -> BaseException | None:
        """Return the chained underlying exception, if any."""

        return self.__cause__

    @classmethod
    def with_context(
        cls,
        message: str,
        context: dict[str, Any] | None = None,
        code: int = 0,
    ) -> VibeVoiceError:
        """Create an error with an explicit context map."""

        return cls(message, code, context=context)


class ServiceConnectionError(VibeVoiceError):
    """Raised when the VibeVoice API server cannot be reached."""

    @classmethod
    def timeout(cls, url: str, timeout_seconds: float) -> ServiceConnectionError:
        """Create a connect/read timeout error."""

        return cls(
            f"Connection to VibeVoice API at '{url}' timed out after "
            f"{_format_seconds(timeout_seconds)} seconds.",
            408,
            context={"url": url, "timeout": timeout_seconds},
        )

    @classmethod
    def refused(cls, url: str) -> ServiceConnectionError:
        """Create a connection refused error."""

        return cls(
            f"Connection to VibeVoice API at '{url}' was refused. "
            "Please ensure the API server is running.",
            503,
            context={"url": url},
        )

    @classmethod
    def failed(cls, url: str, reason: str = "") -> ServiceConnectionError:
        """Create a generic transport failure error."""

        message = f"Failed to connect to VibeVoice API at '{url}'."
        if reason:
            message += f" Reason: {reason}"
        return cls(message, 500, context={"url": url, "reason": reason})


class AuthenticationError(VibeVoiceError):
    """Raised when the API rejects or lacks credentials."""

    @classmethod
    def invalid_api_key(cls) -> AuthenticationError:
        """Create an invalid API key error (HTTP 401)."""

        return cls(
            "Invalid or missing API key. Please check your VIBEVOICE_API_KEY configuration.",
            401,
        )

    @classmethod
    def expired_api_key(cls) -> AuthenticationError:
        """Create an expired API key error."""

        return cls("The API key has expired. Please obtain a new API key.", 401)

    @classmethod
    def missing_api_key(cls) -> AuthenticationError:
        """Create a missing API key error for checks made before any request."""

        return cls(
            "No API key configured. Please set VIBEVOICE_API_KEY in your environment.",
            401,
        )


class RateLimitError(VibeVoiceError):
    """Raised when the API responds with HTTP 429."""

    def __init__(
        self,
        message: str = "Rate limit exceeded.",
        code: int = 429,
        *,
        context: dict[str, Any] | None = None,
        retry_after: int | None = None,
    ) -> None:
        """Initialize rate limit error with an optional retry-after duration."""

        super().__init__(message, code, context=context)
        self.retry_after = retry_after

    @classmethod
    def exceeded(cls, retry_after: int | None = None) -> RateLimitError:
        """Create a rate limit error, optionally advising when to retry."""

        message = "Rate limit exceeded for VibeVoice API."
        if retry_after:
            message += f" Please retry after {retry_after} seconds."
        return cls(
            message,
            429,
            context={"retry_after": retry_after},
            retry_after=retry_after,
        )


class GenerationError(VibeVoiceError):
    """Raised when audio generation is rejected or fails."""

    @classmethod
    def failed(cls, reason: str = "") -> GenerationError:
        """Create a service-reported generation failure."""

        message = "Failed to generate audio."
        if reason:
            message += f" Reason: {reason}"
        return cls(message, 500, context={"reason": reason})


class ValidationError(GenerationError):
    """Raised when request input is invalid; no network call has been made."""

    @classmethod
    def empty_text(cls) -> ValidationError:
        """Create an error for blank input text or an empty conversation."""

        return cls("Cannot generate audio from empty text.", 400)

    @classmethod
    def too_many_speakers(cls, count: int, max_speakers: int = 4) -> ValidationError:
        """Create an error for conversations exceeding the speaker ceiling."""

        return cls(
            f"Too many speakers ({count}). Maximum allowed is {max_speakers}.",
            400,
            context={"count": count, "max": max_speakers},
        )

    @classmethod
    def text_too_long(cls, length: int, max_length: int) -> ValidationError:
        """Create an error for text exceeding a maximum length."""

        return cls(
            f"Text length ({length} characters) exceeds maximum allowed length "
            f"({max_length} characters).",
            400,
            context={"length": length, "max_length": max_length},
        )

    @classmethod
    def invalid_voice(cls, voice: str) -> ValidationError:
        """Create an error for a voice identifier that is not offered."""

        return cls(
            f"The voice '{voice}' is not available. Use `vibevoice voices` to see "
            "available voices.",
            400,
            context={"voice": voice},
        )


class GenericServiceError(VibeVoiceError):
    """Raised for non-2xx responses without a more specific classification."""


class StreamingDisabledError(VibeVoiceError):
    """Raised when streaming is requested while disabled in configuration."""

    @classmethod
    def disabled(cls) -> StreamingDisabledError:
        """Create the streaming-disabled error."""

        return cls(
            "Streaming is disabled. Set VIBEVOICE_STREAMING_ENABLED=true to enable it.",
            400,
        )


class CommandError(VibeVoiceError):
    """CLI-facing failure naming the command stage, the problem, and a remediation hint."""

    def __init__(self, stage: str, detail: str, hint: str | None = None) -> None:
        """Initialize stage, detail, and optional hint."""

        super().__init__(detail, 1, context={"stage": stage})
        self.stage = stage
        self.detail = detail
        self.hint = hint


def _format_seconds(value: float) -> str:
    """Render whole-number seconds without a trailing `.0`."""

    if float(value).is_integer():
        return str(int(value))
    return str(value)
