"""Lazy chunked audio streams over a streamed HTTP response.

Responsibilities:
- Open the streaming request on first pull and yield bounded byte chunks.
- Release the underlying connection on every exit path, including early abandonment.
"""

from __future__ import annotations

from contextlib import closing
from types import TracebackType
from typing import Any, Iterator

import requests

from ..telemetry.logger import RequestLogger
from .transport import HttpTransport


class AudioStream(Iterator[bytes]):
    """Forward-only, non-restartable iterator of audio byte chunks.

    The stream can be consumed with a plain `for` loop; wrapping it in a `with`
    block (or calling `close`) guarantees the response is released when the
    consumer stops early.
    """

    def __init__(
        self,
        transport: HttpTransport,
        path: str,
        payload: dict[str, Any],
        chunk_size: int,
        request_logger: RequestLogger | None = None,
    ) -> None:
        """Prepare the stream; no request is issued until the first chunk is pulled."""

        self._transport = transport
        self._path = path
        self._payload = payload
        self._chunk_size = chunk_size
        self._logger = request_logger or RequestLogger()
        self.chunks_received = 0
        self.bytes_received = 0
        self._chunks = self._iterate()

    def __iter__(self) -> AudioStream:
        """Return the stream itself; iteration is single-pass."""

        return self

    def __next__(self) -> bytes:
        """Return the next non-empty chunk."""

        return next(self._chunks)

    def __enter__(self) -> AudioStream:
        """Enter a scope that closes the stream on exit."""

        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Close the stream when leaving the scope."""

        self.close()

    def close(self) -> None:
        """Stop the stream and release the HTTP connection if it was opened."""

        self._chunks.close()

    def _iterate(self) -> Iterator[bytes]:
        """Open the response and yield chunks until end-of-stream."""

        response = self._transport.open_stream(self._path, self._payload)
        completed = False
        try:
            with closing(response):
                for chunk in response.iter_content(chunk_size=self._chunk_size):
                    if not chunk:
                        continue
                    self.chunks_received += 1
                    self.bytes_received += len(chunk)
                    yield chunk
            completed = True
        except requests.RequestException as exc:
            raise self._transport.classify(exc) from exc
        finally:
            self._logger.stream_closed(self.chunks_received, self.bytes_received, completed)
