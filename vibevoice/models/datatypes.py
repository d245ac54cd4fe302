"""Core datatypes exchanged with the VibeVoice API.

Responsibilities:
- Represent immutable request and response records.
- Convert between wire dictionaries and typed values.

Key types:
- `GenerationRequest`, `ConversationLine`, `AudioResult`, and `Voice`.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
import math
from typing import Any, Mapping, Sequence

from ..errors import ValidationError


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """Single-voice synthesis request.

    Attributes:
        text: Text to synthesize; must be non-empty after trimming.
        voice: Voice identifier resolved against the configured default.
        format: Output format tag.
        sample_rate: Output sample rate in Hz.
    """

    text: str
    voice: str
    format: str
    sample_rate: int

    def __post_init__(self) -> None:
        """Reject blank text before any request is built."""

        if not isinstance(self.text, str) or not self.text.strip():
            raise ValidationError.empty_text()

    def to_payload(self) -> dict[str, Any]:
        """Return the `api/generate` request body."""

        return {
            "text": self.text,
            "voice": self.voice,
            "format": self.format,
            "sample_rate": self.sample_rate,
        }

    def to_stream_payload(self) -> dict[str, Any]:
        """Return the `api/stream` request body."""

        return {"text": self.text, "voice": self.voice, "format": self.format}


@dataclass(frozen=True, slots=True)
class ConversationLine:
    """One line of a multi-speaker conversation script.

    Attributes:
        text: Line text.
        voice: Voice identifier for this line.
        speaker: Optional speaker label.
        options: Optional per-line synthesis options.
    """

    text: str
    voice: str
    speaker: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ConversationLine:
        """Create a line from a mapping with `text` and `voice` keys."""

        return cls(
            text=data["text"],
            voice=data["voice"],
            speaker=data.get("speaker"),
            options=dict(data.get("options") or {}),
        )

    @classmethod
    def from_dict_multiple(cls, lines: Sequence[Mapping[str, Any]]) -> list[ConversationLine]:
        """Create lines from a sequence of mappings."""

        return [cls.from_dict(line) for line in lines]

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form of this line."""

        return {
            "text": self.text,
            "voice": self.voice,
            "speaker": self.speaker,
            "options": dict(self.options),
        }


@dataclass(frozen=True, slots=True)
class AudioResult:
    """Generated audio returned by the API.

    Attributes:
        content: Raw or base64-encoded audio payload.
        format: Output format tag (file extension).
        duration: Audio duration in seconds.
        sample_rate: Sample rate in Hz.
        voice: Voice identifier used, when reported.
        metadata: Additional server-provided metadata.
    """

    content: str
    format: str = "mp3"
    duration: float = 0.0
    sample_rate: int = 24000
    voice: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AudioResult:
        """Create a result from a decoded response body, applying defaults."""

        content = data.get("audio")
        if content is None:
            content = data.get("content")
        fmt = data.get("format")
        duration = data.get("duration")
        sample_rate = data.get("sample_rate")
        return cls(
            content=content if content is not None else "",
            format=fmt if fmt is not None else "mp3",
            duration=float(duration) if duration is not None else 0.0,
            sample_rate=int(sample_rate) if sample_rate is not None else 24000,
            voice=data.get("voice"),
            metadata=dict(data.get("metadata") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a serializable mapping accepted by `from_dict`."""

        return {
            "content": self.content,
            "format": self.format,
            "duration": self.duration,
            "sample_rate": self.sample_rate,
            "voice": self.voice,
            "metadata": dict(self.metadata),
        }

    def is_base64_encoded(self) -> bool:
        """Return whether re-encoding the decoded content reproduces it exactly."""

        try:
            decoded = base64.b64decode(self.content, validate=True)
        except (binascii.Error, ValueError):
            return False
        return base64.b64encode(decoded).decode("ascii") == self.content

    def audio_content(self) -> bytes:
        """Return raw audio bytes, decoding base64 content when detected."""

        if self.is_base64_encoded():
            return base64.b64decode(self.content)
        return self.content.encode("utf-8", errors="surrogateescape")

    def formatted_duration(self) -> str:
        """Return duration as `MM:SS.ss`."""

        return format_duration(self.duration)


@dataclass(frozen=True, slots=True)
class Voice:
    """Voice catalog entry offered by the API."""

    id: str
    name: str
    language: str = "en-US"
    gender: str = "neutral"
    description: str | None = None
    preview_url: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Voice:
        """Create a voice from a catalog entry mapping."""

        return cls(
            id=data["id"],
            name=data["name"],
            language=data.get("language") or "en-US",
            gender=data.get("gender") or "neutral",
            description=data.get("description"),
            preview_url=data.get("preview_url"),
            metadata=dict(data.get("metadata") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the catalog entry mapping for this voice."""

        return {
            "id": self.id,
            "name": self.name,
            "language": self.language,
            "gender": self.gender,
            "description": self.description,
            "preview_url": self.preview_url,
            "metadata": dict(self.metadata),
        }


def format_duration(seconds: float) -> str:
    """Render seconds as `MM:SS.ss` using whole-second remainder."""

    return f"{math.floor(seconds / 60):02d}:{int(seconds) % 60:05.2f}"
