"""Unit tests for CLI runtime resolution helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from vibevoice.cli import _check_storage
from vibevoice.cli_runtime import (
    build_manager,
    load_yaml_config,
    resolve_api_key,
    resolve_runtime_config,
    resolve_runtime_settings,
)
from vibevoice.config import VibeVoiceConfig
from vibevoice.errors import CommandError
from vibevoice.jobs import InlineTaskRunner

from tests.fakes import InMemoryCredentialStore


def test_resolve_api_key_precedence_cli_secure_env_config() -> None:
    """API key sources should resolve as cli > secure > env > config."""

    secure = InMemoryCredentialStore("secure-key")
    empty = InMemoryCredentialStore()
    env = {"VIBEVOICE_API_KEY": "env-key"}

    assert resolve_api_key(" cli-key ", env, "cfg-key", lambda: secure) == ("cli-key", "cli")
    assert resolve_api_key(None, env, "cfg-key", lambda: secure) == ("secure-key", "secure")
    assert resolve_api_key(None, env, "cfg-key", lambda: empty) == ("env-key", "env")
    assert resolve_api_key("  ", {}, "cfg-key", lambda: empty) == ("cfg-key", "config")
    assert resolve_api_key(None, {}, None, lambda: empty) == (None, "none")


def test_resolve_runtime_config_layers_yaml_env_and_key(tmp_path: Path) -> None:
    """Environment settings should override YAML values; the key follows precedence."""

    config_path = tmp_path / "vibevoice.yaml"
    config_path.write_text(
        "api_url: http://yaml-host:8000\ndefault_voice: yaml-voice\napi_key: yaml-key\n",
        encoding="utf-8",
    )

    config = resolve_runtime_config(
        config_file=config_path,
        api_key=None,
        env={"VIBEVOICE_DEFAULT_VOICE": "env-voice"},
        credential_store_factory=InMemoryCredentialStore,
    )

    assert config.api_url == "http://yaml-host:8000"
    assert config.default_voice == "env-voice"
    assert config.api_key == "yaml-key"


def test_resolve_runtime_settings_reports_api_key_source() -> None:
    """The resolved config should come with the label of the winning key source."""

    config, source = resolve_runtime_settings(
        config_file=None,
        api_key=None,
        env={"VIBEVOICE_API_KEY": "env-key"},
        credential_store_factory=InMemoryCredentialStore,
    )
    stored, stored_source = resolve_runtime_settings(
        config_file=None,
        api_key=None,
        env={"VIBEVOICE_API_KEY": "env-key"},
        credential_store_factory=lambda: InMemoryCredentialStore("secure-key"),
    )

    assert (config.api_key, source) == ("env-key", "env")
    assert (stored.api_key, stored_source) == ("secure-key", "secure")


def test_resolve_runtime_config_maps_invalid_env_to_command_error() -> None:
    """Invalid environment values should surface as config-stage command errors."""

    with pytest.raises(CommandError) as caught:
        resolve_runtime_config(
            config_file=None,
            api_key=None,
            env={"VIBEVOICE_SAMPLE_RATE": "loud"},
            credential_store_factory=InMemoryCredentialStore,
        )

    assert caught.value.stage == "config"
    assert "VIBEVOICE_SAMPLE_RATE" in caught.value.detail


def test_load_yaml_config_maps_missing_and_invalid_files(tmp_path: Path) -> None:
    """Missing or invalid config files should raise config-stage errors with hints."""

    invalid = tmp_path / "invalid.yaml"
    invalid.write_text("unknown_key: 1\n", encoding="utf-8")

    assert load_yaml_config(None) is None
    with pytest.raises(CommandError, match="not found") as missing:
        load_yaml_config(tmp_path / "missing.yaml")
    with pytest.raises(CommandError, match="unknown_key"):
        load_yaml_config(invalid)
    assert missing.value.hint is not None


def test_build_manager_wires_filesystem_store_and_inline_runner(tmp_path: Path) -> None:
    """CLI wiring should bind the inline runner to the manager it serves."""

    manager = build_manager(VibeVoiceConfig(storage_disk="local-disk"), tmp_path)

    assert isinstance(manager.task_runner, InlineTaskRunner)
    assert manager.task_runner.manager is manager
    assert manager.store.root == tmp_path  # type: ignore[attr-defined]
    assert manager.store.name == "local-disk"  # type: ignore[attr-defined]


def test_storage_check_reports_rejected_store_path(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A store path outside the disk should fail the storage check without raising."""

    manager = build_manager(VibeVoiceConfig(storage_path="/"), tmp_path)

    _check_storage(manager)

    captured = capsys.readouterr()
    assert "Checking storage (public:/) ... FAIL" in captured.out
    assert "Storage probe failed" in captured.err
