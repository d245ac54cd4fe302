"""Secure credential storage for the VibeVoice API key.

Responsibilities:
- Persist the API key in an OS-backed secure credential store.
- Provide deterministic read/write/delete operations for the CLI.
- Avoid logging or exposing secret values in diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass

import keyring
from keyring.errors import KeyringError, PasswordDeleteError


_DEFAULT_SERVICE_NAME = "vibevoice"
_DEFAULT_ACCOUNT_NAME = "api_key"


class CredentialStore:
    """Interface for secure API key operations."""

    def get_api_key(self) -> str | None:
        """Load the stored API key, when available."""

        raise NotImplementedError

    def set_api_key(self, api_key: str) -> None:
        """Persist an API key."""

        raise NotImplementedError

    def clear_api_key(self) -> bool:
        """Delete a stored API key and return whether one existed."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME
    account_name: str = _DEFAULT_ACCOUNT_NAME

    def get_api_key(self) -> str | None:
        """Return the normalized stored key, or `None` when missing or no backend exists."""

        try:
            value = keyring.get_password(self.service_name, self.account_name)
        except KeyringError:
            return None
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized API key or raise when the backend rejects it."""

        normalized = api_key.strip()
        if not normalized:
            raise ValueError("API key must be a non-empty string.")
        try:
            keyring.set_password(self.service_name, self.account_name, normalized)
        except KeyringError as exc:
            raise RuntimeError(
                "Secure credential storage is unavailable in this environment."
            ) from exc

    def clear_api_key(self) -> bool:
        """Remove the stored API key and report whether one was present."""

        if self.get_api_key() is None:
            return False
        try:
            keyring.delete_password(self.service_name, self.account_name)
        except PasswordDeleteError:
            return False
        return True


def create_credential_store() -> CredentialStore:
    """Create the default credential store implementation."""

    return KeyringCredentialStore()
