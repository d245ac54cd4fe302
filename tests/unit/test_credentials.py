"""Unit tests for secure credential store helpers."""

from __future__ import annotations

import pytest
from keyring.errors import KeyringError, PasswordDeleteError

from vibevoice import credentials
from vibevoice.credentials import KeyringCredentialStore


class FakeKeyringModule:
    """In-memory keyring stub for deterministic credential store tests."""

    def __init__(self) -> None:
        """Initialize fake storage dictionary."""

        self._storage: dict[tuple[str, str], str] = {}

    def get_password(self, service_name: str, account_name: str) -> str | None:
        """Return previously stored password if present."""

        return self._storage.get((service_name, account_name))

    def set_password(self, service_name: str, account_name: str, value: str) -> None:
        """Store password value for the service/account key."""

        self._storage[(service_name, account_name)] = value

    def delete_password(self, service_name: str, account_name: str) -> None:
        """Delete password value, raising like keyring when missing."""

        if (service_name, account_name) not in self._storage:
            raise PasswordDeleteError("not found")
        del self._storage[(service_name, account_name)]


class BrokenKeyringModule:
    """Keyring stub emulating a machine without a usable backend."""

    def get_password(self, service_name: str, account_name: str) -> str | None:
        """Fail like keyring's fail backend."""

        raise KeyringError("No recommended backend was available.")

    def set_password(self, service_name: str, account_name: str, value: str) -> None:
        """Fail like keyring's fail backend."""

        raise KeyringError("No recommended backend was available.")


def test_keyring_store_roundtrip_set_get_clear(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keyring store should set/get/clear API key values via keyring backend."""

    fake_keyring = FakeKeyringModule()
    monkeypatch.setattr(credentials, "keyring", fake_keyring)
    store = KeyringCredentialStore()

    assert store.get_api_key() is None

    store.set_api_key("  abc123  ")
    assert fake_keyring.get_password("vibevoice", "api_key") == "abc123"
    assert store.get_api_key() == "abc123"

    assert store.clear_api_key() is True
    assert store.get_api_key() is None
    assert store.clear_api_key() is False


def test_keyring_store_rejects_blank_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    """Blank keys should not be persisted."""

    monkeypatch.setattr(credentials, "keyring", FakeKeyringModule())

    with pytest.raises(ValueError, match="non-empty"):
        KeyringCredentialStore().set_api_key("   ")


def test_keyring_store_without_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    """Missing backends should read as no key and fail loudly on write."""

    monkeypatch.setattr(credentials, "keyring", BrokenKeyringModule())
    store = KeyringCredentialStore()

    assert store.get_api_key() is None
    assert store.clear_api_key() is False
    with pytest.raises(RuntimeError, match="unavailable"):
        store.set_api_key("abc")
