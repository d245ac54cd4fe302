"""HTTP transport for the VibeVoice API.

Responsibilities:
- Issue one `requests` call per invocation with configured timeouts and headers.
- Decode JSON response bodies into plain Python structures.
- Convert every `requests` failure into a classified VibeVoice error.
"""

from __future__ import annotations

from typing import Any

import requests

from ..config import VibeVoiceConfig
from ..errors import VibeVoiceError
from ..telemetry.logger import RequestLogger
from .classifier import classify_http_failure, classify_transport_failure


class HttpTransport:
    """Minimal requests-based JSON transport bound to one configuration."""

    def __init__(
        self,
        config: VibeVoiceConfig,
        request_logger: RequestLogger | None = None,
    ) -> None:
        """Initialize transport settings from configuration."""

        self.base_url = config.base_url
        self.display_url = config.api_url
        self.connect_timeout_seconds = config.connect_timeout_seconds
        self.read_timeout_seconds = config.timeout_seconds
        self.headers = self.build_headers(config.api_key)
        self._logger = request_logger or RequestLogger()

    @staticmethod
    def build_headers(api_key: str | None) -> dict[str, str]:
        """Return standard JSON headers plus bearer authorization when a key is set."""

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    @property
    def timeout(self) -> tuple[float, float]:
        """Return the `(connect, read)` timeout tuple passed to `requests`."""

        return (self.connect_timeout_seconds, self.read_timeout_seconds)

    def url_for(self, path: str) -> str:
        """Resolve an API path relative to the base URL."""

        return f"{self.base_url}{path.lstrip('/')}"

    def request_json(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Perform one JSON request and return the decoded body.

        Returns:
            The decoded JSON value (`dict` or `list`), or `{}` for an empty or
            non-JSON body.

        Raises:
            VibeVoiceError: A classified transport or HTTP failure.
        """

        response = self._send(method, path, payload, stream=False)
        try:
            return response.json()
        except ValueError:
            return {}

    def open_stream(self, path: str, payload: dict[str, Any]) -> requests.Response:
        """Open a streamed POST response after checking its status.

        The caller owns the returned response and must close it.
        """

        return self._send("POST", path, payload, stream=True)

    def classify(self, exc: requests.RequestException) -> VibeVoiceError:
        """Classify a `requests` failure raised while using this transport."""

        if isinstance(exc, requests.HTTPError):
            return classify_http_failure(exc, url=self.display_url)
        return classify_transport_failure(
            exc,
            url=self.display_url,
            connect_timeout_seconds=self.connect_timeout_seconds,
            read_timeout_seconds=self.read_timeout_seconds,
        )

    def _send(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None,
        *,
        stream: bool,
    ) -> requests.Response:
        """Send a request and map failures consistently."""

        operation = path.rstrip("/").rsplit("/", 1)[-1] or path
        self._logger.request_start(operation, method, path)
        response: requests.Response | None = None
        try:
            response = requests.request(
                method,
                self.url_for(path),
                headers=self.headers,
                json=payload,
                timeout=self.timeout,
                stream=stream,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            error = self.classify(exc)
            if stream and response is not None:
                response.close()
            self._logger.request_failure(operation, type(error).__name__, error.code)
            raise error from exc

        self._logger.request_complete(operation, response.status_code)
        return response
