"""Unit tests for the persistence facade."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from vibevoice.config import VibeVoiceConfig
from vibevoice.errors import VibeVoiceError
from vibevoice.jobs import GenerateVoiceJob
from vibevoice.manager import VibeVoiceManager
from vibevoice.models.datatypes import AudioResult, Voice
from vibevoice.storage import FilesystemByteStore


class FakeClient:
    """Client double returning canned audio and recording calls."""

    def __init__(self, result: AudioResult | None = None) -> None:
        """Initialize with the result every generation returns."""

        self.result = result or AudioResult(content="raw-audio", format="wav", duration=1.5)
        self.calls: list[tuple[str, Any]] = []

    def generate(self, text: str, voice: str | None = None) -> AudioResult:
        """Record a generate call."""

        self.calls.append(("generate", (text, voice)))
        return self.result

    def conversation(self, lines: Any) -> AudioResult:
        """Record a conversation call."""

        self.calls.append(("conversation", lines))
        return self.result

    def stream(self, text: str, voice: str | None = None) -> Any:
        """Return a fixed chunk list."""

        self.calls.append(("stream", (text, voice)))
        return iter([b"a", b"b"])

    def voices(self) -> list[Voice]:
        """Return a single voice."""

        return [Voice(id="v1", name="One")]

    def is_healthy(self) -> bool:
        """Report healthy."""

        return True

    def health(self) -> dict[str, Any]:
        """Return a healthy payload."""

        return {"status": "healthy"}


class RecordingRunner:
    """Task runner double that records enqueued jobs."""

    def __init__(self) -> None:
        """Initialize an empty job log."""

        self.enqueued: list[tuple[GenerateVoiceJob, str | None, str | None]] = []

    def enqueue(
        self,
        job: GenerateVoiceJob,
        connection: str | None = None,
        queue: str | None = None,
    ) -> str:
        """Record the job and routing."""

        self.enqueued.append((job, connection, queue))
        return "queued-1"


def _manager(
    tmp_path: Path,
    *,
    client: FakeClient | None = None,
    runner: RecordingRunner | None = None,
    config: VibeVoiceConfig | None = None,
) -> VibeVoiceManager:
    """Build a manager with a fixed clock and token."""

    return VibeVoiceManager(
        client or FakeClient(),
        config or VibeVoiceConfig(),
        store=FilesystemByteStore(tmp_path),
        task_runner=runner,
        clock=lambda: datetime(2024, 5, 17, 14, 3, 9),
        token_factory=lambda: "deadbeef",
    )


def test_save_audio_writes_decoded_bytes_under_storage_path(tmp_path: Path) -> None:
    """Saved files should land at `<storage_path>/<filename>.<format>`."""

    manager = _manager(tmp_path)

    path = manager.save_audio(AudioResult(content="UklGRg==", format="wav"), "greeting")

    assert path == "vibevoice/greeting.wav"
    assert (tmp_path / "vibevoice" / "greeting.wav").read_bytes() == b"RIFF"


def test_save_audio_default_filename_uses_timestamp_and_token(tmp_path: Path) -> None:
    """Default filenames should follow `vibevoice_<stamp>_<token>`."""

    path = _manager(tmp_path).save_audio(AudioResult(content="x", format="mp3"))

    assert path == "vibevoice/vibevoice_20240517_140309_deadbeef.mp3"


def test_default_filename_token_is_eight_hex_chars(tmp_path: Path) -> None:
    """The real token factory should produce eight lowercase hex characters."""

    manager = VibeVoiceManager(
        FakeClient(), VibeVoiceConfig(), store=FilesystemByteStore(tmp_path)
    )

    token = manager.default_filename().rsplit("_", 1)[-1]

    assert len(token) == 8
    assert all(character in "0123456789abcdef" for character in token)


def test_generate_and_save_and_conversation_and_save(tmp_path: Path) -> None:
    """Combined helpers should generate, then persist."""

    client = FakeClient()
    manager = _manager(tmp_path, client=client, config=VibeVoiceConfig(storage_path="audio/"))

    single = manager.generate_and_save("Hello", "one", voice="v2")
    dialog = manager.conversation_and_save([{"text": "Hi", "voice": "v1"}], "two")

    assert single == "audio/one.wav"
    assert dialog == "audio/two.wav"
    assert client.calls[0] == ("generate", ("Hello", "v2"))
    assert client.calls[1][0] == "conversation"
    assert (tmp_path / "audio" / "one.wav").read_bytes() == b"raw-audio"


def test_delegated_calls_reach_client(tmp_path: Path) -> None:
    """Facade methods should delegate to the client."""

    manager = _manager(tmp_path)

    assert list(manager.stream("Hi")) == [b"a", b"b"]
    assert manager.voices()[0].id == "v1"
    assert manager.is_healthy() is True
    assert manager.health() == {"status": "healthy"}
    assert isinstance(manager.client, FakeClient)
    assert manager.config.storage_path == "vibevoice"


def test_generate_async_enqueues_job_with_queue_routing(tmp_path: Path) -> None:
    """Async generation should route jobs using config queue settings."""

    runner = RecordingRunner()
    config = VibeVoiceConfig(
        queue_connection="redis", queue_name="audio", retry_times=5, retry_sleep_ms=250
    )
    manager = _manager(tmp_path, runner=runner, config=config)

    outcome = manager.generate_async("Hello", voice="v2", filename="later")

    assert outcome == "queued-1"
    job, connection, queue = runner.enqueued[0]
    assert (connection, queue) == ("redis", "audio")
    assert job.text == "Hello"
    assert job.voice == "v2"
    assert job.filename == "later"
    assert job.is_conversation is False
    assert job.tries == 5
    assert job.backoff_seconds == 0.25


def test_conversation_async_marks_job_as_conversation(tmp_path: Path) -> None:
    """Conversation jobs should carry lines and the conversation flag."""

    runner = RecordingRunner()
    manager = _manager(tmp_path, runner=runner)
    lines = [{"text": "Hi", "voice": "v1"}]

    manager.conversation_async(lines, filename="chat")

    job, _connection, queue = runner.enqueued[0]
    assert job.is_conversation is True
    assert job.text == lines
    assert job.tags() == ["vibevoice", "conversation"]
    assert queue == "default"


def test_async_without_runner_raises(tmp_path: Path) -> None:
    """Async helpers should fail clearly without a task runner."""

    with pytest.raises(VibeVoiceError, match="task runner"):
        _manager(tmp_path).generate_async("Hello")
