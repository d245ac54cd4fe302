"""Integration-test fixtures for deterministic CLI runs."""

from __future__ import annotations

import os
from typing import Iterator

import pytest
from loguru import logger

from tests.fakes import InMemoryCredentialStore


@pytest.fixture(autouse=True)
def _isolated_cli_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[InMemoryCredentialStore]:
    """Clear `VIBEVOICE_*` variables and replace the keyring-backed store."""

    for key in list(os.environ):
        if key.startswith("VIBEVOICE_"):
            monkeypatch.delenv(key)
    store = InMemoryCredentialStore()
    monkeypatch.setattr("vibevoice.cli.create_credential_store", lambda: store)
    monkeypatch.setattr("vibevoice.cli_runtime.create_credential_store", lambda: store)
    yield store
    logger.remove()
    logger.disable("vibevoice")


@pytest.fixture
def credential_store(
    _isolated_cli_environment: InMemoryCredentialStore,
) -> InMemoryCredentialStore:
    """Expose the in-memory credential store used by the CLI."""

    return _isolated_cli_environment
