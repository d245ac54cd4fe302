"""Result and persistence facade over the VibeVoice client.

Responsibilities:
- Delegate generation, streaming, catalog, and health calls to the client.
- Persist generated audio into a byte store under the configured path.
- Hand deferred generations to a task runner with queue routing from config.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Sequence
from uuid import uuid4

from .client import ConversationInput, VibeVoiceClientProtocol
from .config import VibeVoiceConfig
from .errors import VibeVoiceError
from .http.streaming import AudioStream
from .jobs import GenerateVoiceJob, TaskRunner
from .models.datatypes import AudioResult, Voice
from .storage import ByteStore
from .telemetry.logger import RequestLogger


def _random_token() -> str:
    """Return eight lowercase hex characters."""

    return uuid4().hex[:8]


class VibeVoiceManager:
    """Facade combining the client with storage and job dispatch."""

    def __init__(
        self,
        client: VibeVoiceClientProtocol,
        config: VibeVoiceConfig,
        *,
        store: ByteStore,
        task_runner: TaskRunner | None = None,
        request_logger: RequestLogger | None = None,
        clock: Callable[[], datetime] = datetime.now,
        token_factory: Callable[[], str] = _random_token,
    ) -> None:
        """Initialize the manager with its collaborators."""

        self._client = client
        self._config = config
        self.store = store
        self.task_runner = task_runner
        self._logger = request_logger or RequestLogger()
        self._clock = clock
        self._token_factory = token_factory

    @property
    def client(self) -> VibeVoiceClientProtocol:
        """Return the underlying API client."""

        return self._client

    @property
    def config(self) -> VibeVoiceConfig:
        """Return the active configuration."""

        return self._config

    def generate(self, text: str, voice: str | None = None) -> AudioResult:
        return self._client.generate(text, voice)

    def conversation(self, lines: Sequence[ConversationInput]) -> AudioResult:
        return self._client.conversation(lines)

    def stream(self, text: str, voice: str | None = None) -> AudioStream:
        return self._client.stream(text, voice)

    def voices(self) -> list[Voice]:
        return self._client.voices()

    def is_healthy(self) -> bool:
        return self._client.is_healthy()

    def health(self) -> Any:
        return self._client.health()

    def generate_and_save(
        self,
        text: str,
        filename: str | None = None,
        voice: str | None = None,
    ) -> str:
        """Generate audio and persist it; return the stored path."""

        return self.save_audio(self.generate(text, voice), filename)

    def conversation_and_save(
        self,
        lines: Sequence[ConversationInput],
        filename: str | None = None,
    ) -> str:
        """Generate conversation audio and persist it; return the stored path."""

        return self.save_audio(self.conversation(lines), filename)

    def save_audio(self, result: AudioResult, filename: str | None = None) -> str:
        """Write decoded audio bytes to `<storage_path>/<filename>.<format>`.

        Existing files at the same path are overwritten.
        """

        name = filename or self.default_filename()
        path = f"{self._config.storage_path.rstrip('/')}/{name}.{result.format}"
        data = result.audio_content()
        self.store.put(path, data)
        self._logger.audio_saved(path, len(data))
        return path

    def default_filename(self) -> str:
        """Return `vibevoice_<YYYYmmdd_HHMMSS>_<8 hex>`."""

        stamp = self._clock().strftime("%Y%m%d_%H%M%S")
        return f"vibevoice_{stamp}_{self._token_factory()}"

    def generate_async(
        self,
        text: str,
        voice: str | None = None,
        filename: str | None = None,
    ) -> Any:
        """Schedule single-voice generation on the task runner."""

        return self.dispatch(self.make_job(text, voice=voice, filename=filename))

    def conversation_async(
        self,
        lines: Sequence[ConversationInput],
        filename: str | None = None,
    ) -> Any:
        """Schedule conversation generation on the task runner."""

        return self.dispatch(
            self.make_job(list(lines), filename=filename, is_conversation=True)
        )

    def make_job(self, text: Any, **options: Any) -> GenerateVoiceJob:
        """Build a job carrying the configured retry policy."""

        return GenerateVoiceJob(
            text=text,
            tries=self._config.retry_times,
            backoff_seconds=self._config.retry_sleep_seconds,
            **options,
        )

    def dispatch(self, job: GenerateVoiceJob) -> Any:
        """Enqueue a job with the configured connection and queue name."""

        if self.task_runner is None:
            raise VibeVoiceError("No task runner configured for asynchronous generation.")
        self._logger.job_event("queued", queue=self._config.queue_name, tags=",".join(job.tags()))
        return self.task_runner.enqueue(
            job,
            connection=self._config.queue_connection,
            queue=self._config.queue_name,
        )
