"""Record integration interfaces for attaching generated audio to domain records.

Responsibilities:
- Define the key-value record and record-store protocols the library consumes.
- Declare which record fields hold text, voice, audio path, and duration through an
  explicit capability interface, with a default field mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class Record(Protocol):
    """Key-value record exposing `get`/`set`/`save`."""

    @property
    def key(self) -> int | str | None:
        """Return the record identifier, or `None` for unsaved records."""

    def get(self, field: str) -> Any:
        """Return a field value, or `None` when unset."""

    def set(self, field: str, value: Any) -> None:
        """Assign a field value."""

    def save(self) -> None:
        """Persist pending field changes."""


class RecordStore(Protocol):
    """Lookup of records by type name and identifier."""

    def find(self, record_type: str, record_id: int | str) -> Record | None:
        """Return the record, or `None` when it does not exist."""


class VoiceContentFields(Protocol):
    """Field mapping a record type implements to take part in audio generation."""

    text_field: str
    audio_file_field: str
    audio_duration_field: str

    def voice_id(self, record: Record) -> str | None:
        """Return the voice for a record, or `None` for the configured default."""


@dataclass(frozen=True, slots=True)
class DefaultVoiceContentFields:
    """Default mapping: `content`, `audio_file`, `audio_duration`, and `voice_id`."""

    text_field: str = "content"
    audio_file_field: str = "audio_file"
    audio_duration_field: str = "audio_duration"
    voice_id_field: str = "voice_id"

    def voice_id(self, record: Record) -> str | None:
        """Return the record's `voice_id` value when set."""

        value = record.get(self.voice_id_field)
        return str(value) if value else None


def store_generated_audio(
    record: Record,
    fields: VoiceContentFields,
    path: str | None,
    duration: float | None,
) -> None:
    """Write audio path and duration onto a record and save it."""

    record.set(fields.audio_file_field, path)
    record.set(fields.audio_duration_field, duration)
    record.save()
