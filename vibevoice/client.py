"""VibeVoice API client.

Responsibilities:
- Validate generation input before any network call.
- Build single-voice, conversation, and streaming requests.
- Serve the voice catalog through an injected TTL cache.
- Report server health, either advisory (`is_healthy`) or raw (`health`).
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, Union

from .cache import CacheStore, InMemoryCacheStore
from .config import VibeVoiceConfig
from .errors import StreamingDisabledError, ValidationError
from .http.streaming import AudioStream
from .http.transport import HttpTransport
from .models.datatypes import AudioResult, ConversationLine, GenerationRequest, Voice
from .telemetry.logger import RequestLogger


MAX_CONVERSATION_SPEAKERS = 4

ConversationInput = Union[ConversationLine, Mapping[str, Any]]


class VibeVoiceClientProtocol(Protocol):
    """Contract shared by the HTTP client and test doubles."""

    def generate(self, text: str, voice: str | None = None) -> AudioResult:
        """Generate audio from text using a single voice."""

    def conversation(self, lines: Sequence[ConversationInput]) -> AudioResult:
        """Generate audio from a multi-speaker conversation."""

    def stream(self, text: str, voice: str | None = None) -> AudioStream:
        """Stream audio chunks for text."""

    def voices(self) -> list[Voice]:
        """Return the voice catalog."""

    def is_healthy(self) -> bool:
        """Return whether the API reports itself healthy."""

    def health(self) -> Any:
        """Return raw API health details."""


class VibeVoiceClient:
    """Requests-based VibeVoice API client."""

    def __init__(
        self,
        config: VibeVoiceConfig | None = None,
        *,
        transport: HttpTransport | None = None,
        cache: CacheStore | None = None,
        request_logger: RequestLogger | None = None,
    ) -> None:
        """Initialize the client with its configuration, transport, and voice cache."""

        self.config = config or VibeVoiceConfig()
        self._logger = request_logger or RequestLogger()
        self.transport = transport or HttpTransport(self.config, request_logger=self._logger)
        self.cache: CacheStore = cache if cache is not None else InMemoryCacheStore()

    @property
    def voices_cache_key(self) -> str:
        """Return the cache key holding the voice catalog."""

        return f"{self.config.cache_prefix}:voices"

    def generate(self, text: str, voice: str | None = None) -> AudioResult:
        """Generate audio from text using a single voice.

        Raises:
            ValidationError: If `text` is blank.
            VibeVoiceError: A classified transport or service failure.
        """

        request = self._build_request(text, voice)
        response = self.transport.request_json("POST", "api/generate", request.to_payload())
        return AudioResult.from_dict(self._as_mapping(response))

    def conversation(self, lines: Sequence[ConversationInput]) -> AudioResult:
        """Generate audio from an ordered multi-speaker conversation.

        Raises:
            ValidationError: If `lines` is empty or uses more than four distinct voices.
            VibeVoiceError: A classified transport or service failure.
        """

        if not lines:
            raise ValidationError.empty_text()

        # The ceiling is keyed on distinct voices, not speaker labels.
        distinct_voices = {self._line_voice(line) for line in lines}
        if len(distinct_voices) > MAX_CONVERSATION_SPEAKERS:
            raise ValidationError.too_many_speakers(
                len(distinct_voices), MAX_CONVERSATION_SPEAKERS
            )

        payload = {
            "lines": [self._line_payload(line) for line in lines],
            "format": self.config.audio_format,
            "sample_rate": self.config.sample_rate,
        }
        response = self.transport.request_json("POST", "api/generate/conversation", payload)
        return AudioResult.from_dict(self._as_mapping(response))

    def stream(self, text: str, voice: str | None = None) -> AudioStream:
        """Return a lazy stream of audio chunks for text.

        Input is validated immediately; the HTTP request is opened on the first pull.

        Raises:
            ValidationError: If `text` is blank.
            StreamingDisabledError: If streaming is disabled in configuration.
        """

        request = self._build_request(text, voice)
        if not self.config.streaming_enabled:
            raise StreamingDisabledError.disabled()
        return AudioStream(
            self.transport,
            "api/stream",
            request.to_stream_payload(),
            self.config.chunk_size,
            request_logger=self._logger,
        )

    def voices(self) -> list[Voice]:
        """Return the voice catalog, served from cache while the entry is live."""

        cache_key = self.voices_cache_key
        if self.config.cache_enabled:
            cached = self.cache.get(cache_key)
            if cached is not None:
                self._logger.cache_hit(cache_key)
                return list(cached)

        response = self.transport.request_json("GET", "api/voices")
        entries = response.get("voices", response) if isinstance(response, dict) else response
        voices = [Voice.from_dict(entry) for entry in entries or []]

        if self.config.cache_enabled:
            self.cache.put(cache_key, voices, self.config.cache_ttl_seconds)
            self._logger.cache_store(cache_key, self.config.cache_ttl_seconds, len(voices))
        return voices

    def is_healthy(self) -> bool:
        """Return `True` only when the API reports `status == "healthy"`; never raises."""

        try:
            health = self.health()
            return isinstance(health, dict) and health.get("status", "") == "healthy"
        except Exception:
            return False

    def health(self) -> Any:
        """Return the decoded health body unchanged; failures propagate as typed errors."""

        return self.transport.request_json("GET", "api/health")

    def _build_request(self, text: str, voice: str | None) -> GenerationRequest:
        """Validate text and resolve the voice against the configured default."""

        return GenerationRequest(
            text=text,
            voice=voice if voice is not None else self.config.default_voice,
            format=self.config.audio_format,
            sample_rate=self.config.sample_rate,
        )

    @staticmethod
    def _line_voice(line: ConversationInput) -> Any:
        """Return the voice identifier of a line instance or mapping."""

        if isinstance(line, ConversationLine):
            return line.voice
        return line.get("voice")

    @staticmethod
    def _line_payload(line: ConversationInput) -> dict[str, Any]:
        """Return the wire form of a line; mappings are passed through."""

        if isinstance(line, ConversationLine):
            return line.to_dict()
        return dict(line)

    @staticmethod
    def _as_mapping(response: Any) -> dict[str, Any]:
        """Coerce a decoded body to a mapping, treating other shapes as empty."""

        if isinstance(response, dict):
            return response
        return {}
