"""Fake HTTP collaborators shared by the VibeVoice tests."""

from __future__ import annotations

import json
from typing import Any

import requests


class FakeResponse:
    """Minimal `requests.Response` stand-in for transport patching."""

    def __init__(
        self,
        *,
        payload: Any = None,
        status_code: int = 200,
        body: bytes | None = None,
        chunks: list[bytes | BaseException] | None = None,
    ) -> None:
        """Initialize the response with a JSON payload or raw body and status."""

        self.status_code = status_code
        if body is None:
            body = b"" if payload is None else json.dumps(payload).encode("utf-8")
        self._body = body
        self._chunks: list[bytes | BaseException] = chunks if chunks is not None else [body]
        self.closed = False
        self.chunks_served = 0

    def json(self) -> Any:
        """Decode the body as JSON, raising `ValueError` on invalid content."""

        return json.loads(self._body.decode("utf-8"))

    def raise_for_status(self) -> None:
        """Raise `HTTPError` for error statuses."""

        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size: int = 1) -> Any:
        """Yield the configured chunks in order."""

        _ = chunk_size
        for chunk in self._chunks:
            if isinstance(chunk, BaseException):
                raise chunk
            self.chunks_served += 1
            yield chunk

    def close(self) -> None:
        """Record that the connection was released."""

        self.closed = True


class RecordingRequests:
    """Callable replacing `requests.request` that records calls and replays responses."""

    def __init__(self) -> None:
        """Initialize an empty call log and response queue."""

        self.calls: list[dict[str, Any]] = []
        self._responses: list[FakeResponse | BaseException] = []

    def queue(self, *responses: FakeResponse | BaseException) -> RecordingRequests:
        """Append responses (or exceptions to raise) in call order."""

        self._responses.extend(responses)
        return self

    def __call__(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        """Record the call and return or raise the next queued item."""

        self.calls.append({"method": method, "url": url, **kwargs})
        if not self._responses:
            raise AssertionError(f"Unexpected HTTP call: {method} {url}")
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class DictRecord:
    """In-memory record implementing `get`/`set`/`save`."""

    def __init__(self, key: int | str | None, **values: Any) -> None:
        """Initialize with a key and field values."""

        self.key = key
        self.values = dict(values)
        self.saves = 0

    def get(self, field: str) -> Any:
        """Return a field value."""

        return self.values.get(field)

    def set(self, field: str, value: Any) -> None:
        """Assign a field value."""

        self.values[field] = value

    def save(self) -> None:
        """Count saves."""

        self.saves += 1


class DictRecordStore:
    """Record store keyed by `(type, id)`."""

    def __init__(self, *records: tuple[str, DictRecord]) -> None:
        """Index records by type and key."""

        self.records = {(record_type, record.key): record for record_type, record in records}

    def find(self, record_type: str, record_id: int | str) -> DictRecord | None:
        """Return a record or `None`."""

        return self.records.get((record_type, record_id))


class InMemoryCredentialStore:
    """In-memory credential store used for CLI tests."""

    def __init__(self, initial_api_key: str | None = None) -> None:
        """Initialize the store with an optional pre-seeded API key."""

        self._api_key = initial_api_key

    def get_api_key(self) -> str | None:
        """Return currently stored API key value."""

        return self._api_key

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized API key value."""

        self._api_key = api_key.strip()

    def clear_api_key(self) -> bool:
        """Clear API key and return whether one existed."""

        existed = self._api_key is not None
        self._api_key = None
        return existed
