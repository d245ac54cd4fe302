"""Shared pytest fixtures for the VibeVoice test suite."""

from __future__ import annotations

from typing import Callable

import pytest

from tests.fakes import FakeResponse, RecordingRequests


@pytest.fixture
def fake_requests(monkeypatch: pytest.MonkeyPatch) -> RecordingRequests:
    """Patch the transport's `requests.request` with a recording fake."""

    recorder = RecordingRequests()
    monkeypatch.setattr("vibevoice.http.transport.requests.request", recorder)
    return recorder


@pytest.fixture
def make_response() -> Callable[..., FakeResponse]:
    """Expose the fake response factory to tests."""

    return FakeResponse
