"""Audio lifecycle for records that carry speakable text.

Responsibilities:
- Generate, regenerate, and delete audio attached to a record.
- Schedule record generation through the manager's task runner.
- Format stored durations for display.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from .manager import VibeVoiceManager
from .models.datatypes import AudioResult, format_duration
from .records import (
    DefaultVoiceContentFields,
    Record,
    VoiceContentFields,
    store_generated_audio,
)


class VoiceContent:
    """Audio operations for one record type, driven by its field mapping."""

    def __init__(
        self,
        manager: VibeVoiceManager,
        record_type: str,
        fields: VoiceContentFields | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the service for a record type."""

        self.manager = manager
        self.record_type = record_type
        self.fields: VoiceContentFields = fields or DefaultVoiceContentFields()
        self._clock = clock

    def voice_text(self, record: Record) -> str:
        """Return the record text, or an empty string when unset."""

        value = record.get(self.fields.text_field)
        return "" if value is None else str(value)

    def generate_audio(self, record: Record, voice: str | None = None) -> AudioResult:
        """Generate audio synchronously, save it, and update the record."""

        result = self.manager.generate(
            self.voice_text(record), voice or self.fields.voice_id(record)
        )
        path = self.manager.save_audio(result, self.audio_filename(record))
        store_generated_audio(record, self.fields, path, result.duration)
        return result

    def generate_audio_async(self, record: Record, voice: str | None = None) -> Any:
        """Schedule generation for the record through the task runner."""

        job = self.manager.make_job(
            self.voice_text(record),
            voice=voice or self.fields.voice_id(record),
            filename=self.audio_filename(record),
            record_type=self.record_type,
            record_id=record.key,
            fields=self.fields,
        )
        return self.manager.dispatch(job)

    def has_audio(self, record: Record) -> bool:
        return bool(record.get(self.fields.audio_file_field))

    def audio_path(self, record: Record) -> str | None:
        """Return the full storage location of the record audio, if any."""

        stored = record.get(self.fields.audio_file_field)
        if not stored:
            return None
        return self.manager.store.location(stored)

    def delete_audio(self, record: Record) -> bool:
        """Remove the stored file and clear the record fields.

        Returns `False` when the record had no audio attached.
        """

        stored = record.get(self.fields.audio_file_field)
        if not stored:
            return False
        if self.manager.store.exists(stored):
            self.manager.store.delete(stored)
        store_generated_audio(record, self.fields, None, None)
        return True

    def regenerate_audio(self, record: Record, voice: str | None = None) -> AudioResult:
        self.delete_audio(record)
        return self.generate_audio(record, voice)

    def formatted_audio_duration(self, record: Record) -> str | None:
        """Return the stored duration as `MM:SS.ss`, or `None` when unset."""

        duration = record.get(self.fields.audio_duration_field)
        if duration is None:
            return None
        return format_duration(float(duration))

    def audio_filename(self, record: Record) -> str:
        """Return `<type>_<key>_<YYYYmmdd_HHMMSS>` in lowercase."""

        key = record.key if record.key is not None else "new"
        stamp = self._clock().strftime("%Y%m%d_%H%M%S")
        return f"{self.record_type}_{key}_{stamp}".lower()
