"""Configuration model and loaders for the VibeVoice client.

Responsibilities:
- Define client configuration as a typed dataclass with validation.
- Provide loader entry points for environment- and YAML-based configuration.
- Render a redacted settings table for diagnostics.

Key types:
- `VibeVoiceConfig`: normalized settings owned by one client/manager instance.
- `ConfigLoader`: static construction helpers for `VibeVoiceConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import os
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from .parsing import (
    normalize_optional_string,
    parse_non_negative_float,
    parse_permissive_boolean,
    parse_positive_int,
)


_DEFAULT_API_URL = "http://localhost:8000"
_DEFAULT_VOICE = "en-US-female-1"
_SUPPORTED_AUDIO_FORMATS = frozenset({"mp3", "wav", "ogg", "flac", "aac", "opus", "pcm"})


@dataclass(slots=True)
class VibeVoiceConfig:
    """Settings for API access, audio output, storage, queueing, streaming, and caching.

    Attributes:
        api_url: Base URL of the VibeVoice API server.
        api_key: Optional bearer token sent with every request.
        timeout_seconds: Read timeout for HTTP calls.
        connect_timeout_seconds: Connect timeout for HTTP calls.
        default_voice: Voice used when a request does not name one.
        audio_format: Output format tag requested from the server.
        sample_rate: Output sample rate requested from the server.
        bitrate: Preferred output bitrate in kbps (informational).
        storage_disk: Byte-store name where generated audio is persisted.
        storage_path: Base directory inside the byte store.
        queue_connection: Optional task-runner connection name.
        queue_name: Task-runner queue name.
        streaming_enabled: Whether `stream` requests are allowed.
        chunk_size: Maximum streamed chunk size in bytes.
        cache_enabled: Whether the voice catalog is cached.
        cache_ttl_seconds: Voice catalog cache lifetime.
        cache_prefix: Prefix for cache keys.
        retry_times: Attempts granted to asynchronous jobs.
        retry_sleep_ms: Fixed delay between asynchronous job attempts.
    """

    api_url: str = _DEFAULT_API_URL
    api_key: str | None = None
    timeout_seconds: float = 120.0
    connect_timeout_seconds: float = 10.0
    default_voice: str = _DEFAULT_VOICE
    audio_format: str = "mp3"
    sample_rate: int = 24000
    bitrate: int = 128
    storage_disk: str = "public"
    storage_path: str = "vibevoice"
    queue_connection: str | None = None
    queue_name: str | None = "default"
    streaming_enabled: bool = True
    chunk_size: int = 4096
    cache_enabled: bool = True
    cache_ttl_seconds: int = 3600
    cache_prefix: str = "vibevoice"
    retry_times: int = 3
    retry_sleep_ms: int = 1000

    def validate(self) -> None:
        """Validate configuration values before constructing a client."""

        self._require_non_empty(self.api_url, "api_url")
        if not self.api_url.startswith(("http://", "https://")):
            raise ValueError("`api_url` must start with `http://` or `https://`.")
        self._require_non_empty(self.default_voice, "default_voice")
        self._require_non_empty(self.storage_path, "storage_path")
        if self.storage_path.startswith("/"):
            raise ValueError("`storage_path` must be relative to the storage disk.")
        if self.audio_format not in _SUPPORTED_AUDIO_FORMATS:
            supported = ", ".join(sorted(_SUPPORTED_AUDIO_FORMATS))
            raise ValueError(
                f"Unsupported `audio_format` value `{self.audio_format}`; supported: {supported}."
            )
        if self.timeout_seconds <= 0 or self.connect_timeout_seconds <= 0:
            raise ValueError("HTTP timeouts must be positive numbers of seconds.")
        for field_name in ("sample_rate", "bitrate", "chunk_size", "cache_ttl_seconds"):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"`{field_name}` must be a positive integer.")
        if self.retry_times <= 0:
            raise ValueError("`retry_times` must be a positive integer.")
        if self.retry_sleep_ms < 0:
            raise ValueError("`retry_sleep_ms` must not be negative.")

    @property
    def base_url(self) -> str:
        """Return the API base URL normalized with a single trailing slash."""

        return self.api_url.rstrip("/") + "/"

    @property
    def retry_sleep_seconds(self) -> float:
        """Return the asynchronous retry delay in seconds."""

        return self.retry_sleep_ms / 1000.0

    def with_overrides(self, **overrides: Any) -> VibeVoiceConfig:
        """Return a validated copy with non-`None` overrides applied."""

        applied = {key: value for key, value in overrides.items() if value is not None}
        updated = replace(self, **applied)
        updated.validate()
        return updated

    def as_display_rows(self, api_key_source: str | None = None) -> list[tuple[str, str]]:
        """Return non-secret settings rows for CLI diagnostics."""

        rows = [
            ("API URL", self.api_url),
            ("API Key", _redact_api_key(self.api_key)),
            ("Timeout", f"{self.timeout_seconds:g}s"),
            ("Connect Timeout", f"{self.connect_timeout_seconds:g}s"),
            ("Default Voice", self.default_voice),
            ("Audio Format", f"{self.audio_format} @ {self.sample_rate} Hz"),
            ("Storage Disk", self.storage_disk),
            ("Storage Path", self.storage_path),
            ("Voice Cache", f"{self.cache_ttl_seconds}s" if self.cache_enabled else "disabled"),
        ]
        if api_key_source is not None:
            rows.insert(2, ("API Key Source", api_key_source))
        return rows

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that a string field is not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


def _redact_api_key(api_key: str | None) -> str:
    """Show only the last four characters of an API key."""

    if not api_key:
        return "Not set"
    return f"***{api_key[-4:]}"


def _parse_optional_string(value: object, key: str) -> str | None:
    """Normalize optional string settings; blank values become `None`."""

    return normalize_optional_string(value)


def _parse_required_string(value: object, key: str) -> str:
    """Normalize required string settings."""

    normalized = normalize_optional_string(value)
    if normalized is None:
        raise ValueError(f"`{key}` must be a non-empty string.")
    return normalized


def _parse_boolean(value: object, key: str) -> bool:
    """Parse permissive boolean settings."""

    parsed = parse_permissive_boolean(value)
    if parsed is None:
        raise ValueError(
            f"`{key}` must be a boolean value (`true`/`false`, `1`/`0`, `yes`/`no`)."
        )
    return parsed


def _parse_non_negative_int(value: object, key: str) -> int:
    """Parse an integer that may be zero."""

    parsed = parse_non_negative_float(value, key)
    if not parsed.is_integer():
        raise ValueError(f"`{key}` must be a non-negative integer.")
    return int(parsed)


_FieldParser = Callable[[object, str], Any]

# (config field, environment variable, parser)
_SETTINGS: tuple[tuple[str, str, _FieldParser], ...] = (
    ("api_url", "VIBEVOICE_API_URL", _parse_required_string),
    ("api_key", "VIBEVOICE_API_KEY", _parse_optional_string),
    ("timeout_seconds", "VIBEVOICE_TIMEOUT", parse_non_negative_float),
    ("connect_timeout_seconds", "VIBEVOICE_CONNECT_TIMEOUT", parse_non_negative_float),
    ("default_voice", "VIBEVOICE_DEFAULT_VOICE", _parse_required_string),
    ("audio_format", "VIBEVOICE_AUDIO_FORMAT", _parse_required_string),
    ("sample_rate", "VIBEVOICE_SAMPLE_RATE", parse_positive_int),
    ("bitrate", "VIBEVOICE_BITRATE", parse_positive_int),
    ("storage_disk", "VIBEVOICE_STORAGE_DISK", _parse_required_string),
    ("storage_path", "VIBEVOICE_STORAGE_PATH", _parse_required_string),
    ("queue_connection", "VIBEVOICE_QUEUE_CONNECTION", _parse_optional_string),
    ("queue_name", "VIBEVOICE_QUEUE_NAME", _parse_optional_string),
    ("streaming_enabled", "VIBEVOICE_STREAMING_ENABLED", _parse_boolean),
    ("chunk_size", "VIBEVOICE_CHUNK_SIZE", parse_positive_int),
    ("cache_enabled", "VIBEVOICE_CACHE_ENABLED", _parse_boolean),
    ("cache_ttl_seconds", "VIBEVOICE_CACHE_TTL", parse_positive_int),
    ("retry_times", "VIBEVOICE_RETRY_TIMES", parse_positive_int),
    ("retry_sleep_ms", "VIBEVOICE_RETRY_SLEEP", _parse_non_negative_int),
)


class ConfigLoader:
    """Factory methods for creating `VibeVoiceConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(field.name for field in fields(VibeVoiceConfig))

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> VibeVoiceConfig:
        """Create a validated config from `VIBEVOICE_*` environment variables."""

        config = VibeVoiceConfig(**ConfigLoader.env_values(env))
        config.validate()
        return config

    @staticmethod
    def env_values(env: Mapping[str, str] | None = None) -> dict[str, Any]:
        """Parse the `VIBEVOICE_*` variables that are set into config field values."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        values: dict[str, Any] = {}
        for field_name, env_key, parser in _SETTINGS:
            if env_key not in env_map:
                continue
            raw_value = env_map[env_key]
            if normalize_optional_string(raw_value) is None:
                continue
            try:
                values[field_name] = parser(raw_value, field_name)
            except ValueError as exc:
                raise ValueError(f"Environment variable `{env_key}` is invalid: {exc}") from exc
        return values

    @staticmethod
    def from_yaml(path: Path) -> VibeVoiceConfig:
        """Create a validated config from a YAML mapping file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_mapping(
        payload: Mapping[str, Any], source_label: str = "config mapping"
    ) -> VibeVoiceConfig:
        """Create a validated config from a plain mapping keyed by field name."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        parsers = {field_name: parser for field_name, _env_key, parser in _SETTINGS}
        values: dict[str, Any] = {}
        for key, raw_value in payload.items():
            parser = parsers.get(key, _parse_required_string)
            if raw_value is None:
                continue
            try:
                values[key] = parser(raw_value, key)
            except ValueError as exc:
                raise ValueError(f"{source_label} field `{key}` is invalid: {exc}") from exc

        config = VibeVoiceConfig(**values)
        config.validate()
        return config
