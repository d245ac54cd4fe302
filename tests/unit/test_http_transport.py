"""Unit tests for the requests-based HTTP transport."""

from __future__ import annotations

import pytest
import requests

from vibevoice.config import VibeVoiceConfig
from vibevoice.errors import AuthenticationError, ServiceConnectionError
from vibevoice.http.transport import HttpTransport

from tests.fakes import FakeResponse, RecordingRequests


def test_build_headers_adds_bearer_only_when_key_is_set() -> None:
    """Authorization should be sent only when an API key is configured."""

    assert HttpTransport.build_headers(None) == {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    assert HttpTransport.build_headers("k-1")["Authorization"] == "Bearer k-1"


def test_request_json_sends_configured_url_headers_and_timeouts(
    fake_requests: RecordingRequests,
) -> None:
    """Requests should resolve against the base URL with the `(connect, read)` timeout."""

    config = VibeVoiceConfig(
        api_url="https://tts.example.com/",
        api_key="secret",
        timeout_seconds=30,
        connect_timeout_seconds=5,
    )
    fake_requests.queue(FakeResponse(payload={"status": "healthy"}))

    body = HttpTransport(config).request_json("GET", "api/health")

    assert body == {"status": "healthy"}
    call = fake_requests.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://tts.example.com/api/health"
    assert call["timeout"] == (5, 30)
    assert call["headers"]["Authorization"] == "Bearer secret"
    assert call["stream"] is False


def test_request_json_returns_empty_mapping_for_non_json_body(
    fake_requests: RecordingRequests,
) -> None:
    """Non-JSON success bodies should decode as an empty mapping."""

    fake_requests.queue(FakeResponse(body=b"<html>ok</html>"))

    assert HttpTransport(VibeVoiceConfig()).request_json("GET", "api/health") == {}


def test_request_failures_are_classified_and_chained(
    fake_requests: RecordingRequests,
) -> None:
    """Transport exceptions should surface as typed errors chained to the original."""

    original = requests.ConnectionError(ConnectionRefusedError(111, "refused"))
    fake_requests.queue(original)

    with pytest.raises(ServiceConnectionError) as caught:
        HttpTransport(VibeVoiceConfig()).request_json("GET", "api/voices")

    assert caught.value.code == 503
    assert caught.value.cause is original


def test_http_status_failures_are_classified(fake_requests: RecordingRequests) -> None:
    """HTTP error statuses should map through the HTTP classifier."""

    fake_requests.queue(FakeResponse(payload={"message": "denied"}, status_code=401))

    with pytest.raises(AuthenticationError):
        HttpTransport(VibeVoiceConfig()).request_json("POST", "api/generate", {"text": "x"})


def test_open_stream_closes_response_on_error_status(fake_requests: RecordingRequests) -> None:
    """A failing streamed response should be released before the error propagates."""

    response = FakeResponse(payload={"message": "overloaded"}, status_code=503)
    fake_requests.queue(response)

    with pytest.raises(Exception) as caught:
        HttpTransport(VibeVoiceConfig()).open_stream("api/stream", {"text": "hi"})

    assert caught.value.code == 503  # type: ignore[attr-defined]
    assert caught.value.message == "overloaded"  # type: ignore[attr-defined]
    assert response.closed is True
    assert fake_requests.calls[0]["stream"] is True
