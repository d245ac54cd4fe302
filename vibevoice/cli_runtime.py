"""CLI runtime resolution helpers.

This module isolates config-file loading, API key source precedence, and
collaborator wiring from the command layer.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Mapping, Protocol

from .cache import InMemoryCacheStore
from .client import VibeVoiceClient
from .config import ConfigLoader, VibeVoiceConfig
from .credentials import create_credential_store
from .errors import CommandError
from .jobs import InlineTaskRunner
from .manager import VibeVoiceManager
from .parsing import normalize_optional_string
from .storage import FilesystemByteStore
from .telemetry.logger import RequestLogger


class CredentialStoreProtocol(Protocol):
    """Protocol for credential lookups used by CLI runtime resolution."""

    def get_api_key(self) -> str | None:
        """Return the currently stored API key, if available."""


def load_yaml_config(config_path: Path | None) -> VibeVoiceConfig | None:
    """Load a YAML config file when requested and map failures to command errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise CommandError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise CommandError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config keys/values and rerun.",
        ) from exc
    except Exception as exc:
        raise CommandError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def resolve_api_key(
    cli_api_key: str | None,
    env: Mapping[str, str],
    config_api_key: str | None,
    credential_store_factory: Callable[[], CredentialStoreProtocol] | None = None,
) -> tuple[str | None, str]:
    """Resolve the API key by precedence `cli > secure > env > config`.

    Returns:
        The key (or `None`) and a label naming the source it came from.
    """

    cli_value = normalize_optional_string(cli_api_key)
    if cli_value is not None:
        return cli_value, "cli"

    factory = credential_store_factory or create_credential_store
    stored_value = factory().get_api_key()
    if stored_value is not None:
        return stored_value, "secure"

    env_value = normalize_optional_string(env.get("VIBEVOICE_API_KEY"))
    if env_value is not None:
        return env_value, "env"

    config_value = normalize_optional_string(config_api_key)
    if config_value is not None:
        return config_value, "config"
    return None, "none"


def resolve_runtime_settings(
    config_file: Path | None,
    api_key: str | None,
    env: Mapping[str, str] | None = None,
    credential_store_factory: Callable[[], CredentialStoreProtocol] | None = None,
) -> tuple[VibeVoiceConfig, str]:
    """Build the effective config and name the source of its API key.

    YAML values (or defaults) are overridden by `VIBEVOICE_*` environment values;
    the API key follows `resolve_api_key` precedence.
    """

    env_map: Mapping[str, str] = os.environ if env is None else env
    base_config = load_yaml_config(config_file) or VibeVoiceConfig()
    resolved_key, key_source = resolve_api_key(
        cli_api_key=api_key,
        env=env_map,
        config_api_key=base_config.api_key,
        credential_store_factory=credential_store_factory,
    )
    try:
        env_values = ConfigLoader.env_values(env_map)
        env_values["api_key"] = resolved_key
        config = base_config.with_overrides(**env_values)
    except ValueError as exc:
        raise CommandError(
            stage="config",
            detail=str(exc),
            hint="Check `VIBEVOICE_*` environment variables.",
        ) from exc
    return config, key_source


def resolve_runtime_config(
    config_file: Path | None,
    api_key: str | None,
    env: Mapping[str, str] | None = None,
    credential_store_factory: Callable[[], CredentialStoreProtocol] | None = None,
) -> VibeVoiceConfig:
    """Build the effective config from YAML defaults, environment, and the resolved key."""

    config, _key_source = resolve_runtime_settings(
        config_file=config_file,
        api_key=api_key,
        env=env,
        credential_store_factory=credential_store_factory,
    )
    return config


def build_manager(
    config: VibeVoiceConfig,
    out_dir: Path,
) -> VibeVoiceManager:
    """Wire client, filesystem store, and inline task runner for one CLI invocation."""

    request_logger = RequestLogger()
    client = VibeVoiceClient(
        config,
        cache=InMemoryCacheStore(),
        request_logger=request_logger,
    )
    runner = InlineTaskRunner(request_logger=request_logger)
    manager = VibeVoiceManager(
        client,
        config,
        store=FilesystemByteStore(out_dir, name=config.storage_disk),
        task_runner=runner,
        request_logger=request_logger,
    )
    runner.bind(manager)
    return manager
