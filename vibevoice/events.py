"""Generation lifecycle events and a minimal synchronous dispatcher."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Sequence, Union

from .models.datatypes import AudioResult, ConversationLine


JobText = Union[str, Sequence[Union[ConversationLine, dict[str, Any]]]]


@dataclass(frozen=True, slots=True)
class VoiceGenerated:
    """Emitted after audio was generated and saved."""

    result: AudioResult
    path: str
    record_type: str | None = None
    record_id: int | str | None = None


@dataclass(frozen=True, slots=True)
class VoiceGenerationFailed:
    """Emitted when a generation attempt fails; carries the original error."""

    error: BaseException
    text: JobText
    voice: str | None = None
    record_type: str | None = None
    record_id: int | str | None = None

    @property
    def error_message(self) -> str:
        """Return the failure message."""

        return str(self.error)


Listener = Callable[[Any], None]


class EventDispatcher:
    """Synchronous in-process dispatcher; listener exceptions propagate to the caller."""

    def __init__(self) -> None:
        self._listeners: dict[type, list[Listener]] = defaultdict(list)

    def subscribe(self, event_type: type, listener: Listener) -> None:
        """Register a listener for an event type."""

        self._listeners[event_type].append(listener)

    def dispatch(self, event: object) -> None:
        """Call every listener registered for the event's type, in order."""

        for listener in list(self._listeners.get(type(event), ())):
            listener(event)
