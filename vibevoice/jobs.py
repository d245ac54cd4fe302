"""Background generation jobs and task runners.

Responsibilities:
- Describe one deferred generation as a self-contained job.
- Save the result, update the associated record, and dispatch lifecycle events.
- Run jobs in-process with bounded retries for callers without a queue.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import time
from typing import TYPE_CHECKING, Any, Callable, Protocol

from .events import EventDispatcher, JobText, VoiceGenerated, VoiceGenerationFailed
from .records import (
    DefaultVoiceContentFields,
    RecordStore,
    VoiceContentFields,
    store_generated_audio,
)
from .telemetry.logger import RequestLogger

if TYPE_CHECKING:
    from .manager import VibeVoiceManager


@dataclass(slots=True)
class GenerateVoiceJob:
    """Deferred single-voice or conversation generation."""

    text: JobText
    voice: str | None = None
    filename: str | None = None
    is_conversation: bool = False
    record_type: str | None = None
    record_id: int | str | None = None
    tries: int = 3
    backoff_seconds: float = 10.0
    fields: VoiceContentFields = field(default_factory=DefaultVoiceContentFields)

    def handle(
        self,
        manager: VibeVoiceManager,
        records: RecordStore | None = None,
        events: EventDispatcher | None = None,
    ) -> str:
        """Generate, save, and attach audio; return the stored path.

        Any failure dispatches `VoiceGenerationFailed` and is re-raised.
        """

        try:
            if self.is_conversation:
                result = manager.conversation(list(self.text))
            else:
                result = manager.generate(str(self.text), self.voice)
            path = manager.save_audio(result, self.filename)
            self._update_record(records, path, result.duration)
        except Exception as exc:
            self.failed(exc, events)
            raise

        if events is not None:
            events.dispatch(
                VoiceGenerated(
                    result=result,
                    path=path,
                    record_type=self.record_type,
                    record_id=self.record_id,
                )
            )
        return path

    def failed(self, error: BaseException, events: EventDispatcher | None = None) -> None:
        """Dispatch the failure event for this job."""

        if events is None:
            return
        events.dispatch(
            VoiceGenerationFailed(
                error=error,
                text=self.text,
                voice=self.voice,
                record_type=self.record_type,
                record_id=self.record_id,
            )
        )

    def tags(self) -> list[str]:
        """Return monitoring tags for queue dashboards."""

        tags = ["vibevoice"]
        if self.is_conversation:
            tags.append("conversation")
        if self.record_type and self.record_id is not None:
            tags.append(f"{self.record_type}:{self.record_id}")
        return tags

    def _update_record(self, records: RecordStore | None, path: str, duration: float) -> None:
        """Store path and duration on the associated record, when one exists."""

        if records is None or not self.record_type or self.record_id is None:
            return
        record = records.find(self.record_type, self.record_id)
        if record is None:
            return
        store_generated_audio(record, self.fields, path, duration)


class TaskRunner(Protocol):
    """Protocol for schedulers that accept generation jobs."""

    def enqueue(
        self,
        job: GenerateVoiceJob,
        connection: str | None = None,
        queue: str | None = None,
    ) -> Any:
        """Schedule a job on the named connection and queue."""


class InlineTaskRunner:
    """Run jobs immediately in the calling thread with bounded retries."""

    def __init__(
        self,
        manager: VibeVoiceManager | None = None,
        *,
        records: RecordStore | None = None,
        events: EventDispatcher | None = None,
        sleeper: Callable[[float], None] = time.sleep,
        request_logger: RequestLogger | None = None,
    ) -> None:
        """Initialize the runner; `manager` may be bound later via `bind`."""

        self.manager = manager
        self.records = records
        self.events = events
        self._sleeper = sleeper
        self._logger = request_logger or RequestLogger()

    def bind(self, manager: VibeVoiceManager) -> None:
        """Attach the manager jobs run against."""

        self.manager = manager

    def enqueue(
        self,
        job: GenerateVoiceJob,
        connection: str | None = None,
        queue: str | None = None,
    ) -> str:
        """Run a job to completion and return the stored audio path.

        Attempts are capped at `job.tries`; the last error is re-raised after
        `job.failed` has been notified.
        """

        if self.manager is None:
            raise RuntimeError("InlineTaskRunner has no manager bound.")

        attempts = max(1, job.tries)
        queue_name = queue or "default"
        attempt = 0
        while True:
            attempt += 1
            self._logger.job_event("attempt", attempt=attempt, queue=queue_name)
            try:
                path = job.handle(self.manager, self.records, self.events)
            except Exception as exc:
                if attempt >= attempts:
                    self._logger.job_event(
                        "failed", attempt=attempt, error_type=type(exc).__name__
                    )
                    job.failed(exc, self.events)
                    raise
                self._logger.job_event(
                    "retry", attempt=attempt, backoff=job.backoff_seconds
                )
                self._sleeper(job.backoff_seconds)
                continue
            self._logger.job_event("completed", attempt=attempt, path=path)
            return path
