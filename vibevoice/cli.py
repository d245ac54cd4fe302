"""Command-line interface for VibeVoice.

Responsibilities:
- Expose generation, voice listing, connectivity checks, and credential management.
- Resolve runtime configuration and wire collaborators for each invocation.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import json
from pathlib import Path
from time import perf_counter
from typing import Annotated

import typer

from .cli_rendering import (
    echo_rows,
    echo_task,
    echo_voice_json,
    echo_voice_table,
    exit_with_command_error,
    filter_voices,
)
from .cli_runtime import build_manager, resolve_runtime_config, resolve_runtime_settings
from .credentials import create_credential_store
from .errors import CommandError
from .manager import VibeVoiceManager
from .parsing import normalize_optional_string
from .telemetry.logger import configure_cli_logging

app = typer.Typer(
    name="vibevoice",
    no_args_is_help=True,
    help="VibeVoice text-to-speech CLI.",
)

_TEST_TEXT = "Hello, this is a test of the VibeVoice integration."

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with client settings."),
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="API key override. Prefer `vibevoice credentials --set-api-key`.",
    ),
]
OutOption = Annotated[
    Path,
    typer.Option("--out", help="Directory the storage path is resolved against."),
]


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show request-level debug logs."),
    ] = False,
) -> None:
    """Configure logging for every command."""

    configure_cli_logging(level="DEBUG" if verbose else "INFO")


@app.command("generate")
def generate_command(
    text: Annotated[str, typer.Argument(help="The text to convert to speech.")],
    voice: Annotated[
        str | None, typer.Option("--voice", help="The voice id to use.")
    ] = None,
    output: Annotated[
        str | None,
        typer.Option("--output", help="Output filename without extension."),
    ] = None,
    run_async: Annotated[
        bool,
        typer.Option("--async", help="Run generation as a background job."),
    ] = False,
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
    out: OutOption = Path("."),
) -> None:
    """Generate audio from text and save it."""

    if normalize_optional_string(text) is None:
        exit_with_command_error(
            "generate",
            CommandError(
                stage="input",
                detail="Text cannot be empty.",
                hint="Pass the text to speak as the first argument.",
            ),
        )

    try:
        config = resolve_runtime_config(config_file=config_file, api_key=api_key)
        manager = build_manager(config, out)
        if run_async:
            path = manager.generate_async(text, voice=voice, filename=output)
            typer.echo("Audio generation job dispatched.")
            typer.echo(f"File: {path}")
            return

        typer.echo("Generating audio...")
        started = perf_counter()
        path = manager.generate_and_save(text, filename=output, voice=voice)
        elapsed = perf_counter() - started
    except Exception as exc:
        exit_with_command_error("generate", exc)

    typer.secho("Audio generated successfully!", fg=typer.colors.GREEN)
    echo_rows(
        [
            ("File", path),
            ("Voice", voice or config.default_voice),
            ("Generation Time", f"{elapsed:.2f}s"),
        ]
    )


@app.command("voices")
def voices_command(
    language: Annotated[
        str | None,
        typer.Option("--language", help="Filter voices by language, e.g. `en-US`."),
    ] = None,
    gender: Annotated[
        str | None,
        typer.Option("--gender", help="Filter voices by gender (male, female, neutral)."),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
) -> None:
    """List voices available on the API server."""

    try:
        config = resolve_runtime_config(config_file=config_file, api_key=api_key)
        manager = build_manager(config, Path("."))
        voices = filter_voices(manager.voices(), language=language, gender=gender)
    except Exception as exc:
        exit_with_command_error("voices", exc)

    if not voices:
        typer.secho("No voices found matching the criteria.", fg=typer.colors.YELLOW)
        return
    if as_json:
        echo_voice_json(voices)
        return
    echo_voice_table(voices, config.default_voice)


@app.command("test")
def test_command(
    full: Annotated[
        bool,
        typer.Option("--full", help="Also generate and delete a short test file."),
    ] = False,
    config_file: ConfigOption = None,
    api_key: ApiKeyOption = None,
    out: OutOption = Path("."),
) -> None:
    """Check configuration, API health, voice catalog, and storage."""

    try:
        config, key_source = resolve_runtime_settings(config_file=config_file, api_key=api_key)
        manager = build_manager(config, out)
    except Exception as exc:
        exit_with_command_error("test", exc)

    typer.echo("Testing VibeVoice API connection...")
    echo_task("Checking configuration", True)
    echo_rows(config.as_display_rows(api_key_source=key_source))

    checks = [_check_health, _check_voices]
    if full:
        checks.append(_check_generation)
    for check in checks:
        if not check(manager):
            raise typer.Exit(code=1)

    _check_storage(manager)
    typer.secho("All tests passed successfully!", fg=typer.colors.GREEN)


def _check_health(manager: VibeVoiceManager) -> bool:
    """Report API health; passes only on `status == "healthy"`."""

    try:
        health = manager.health()
    except Exception as exc:
        echo_task("Checking API health", False)
        typer.secho(f"Health check failed: {exc}", fg=typer.colors.RED, err=True)
        return False

    healthy = isinstance(health, dict) and health.get("status", "") == "healthy"
    echo_task("Checking API health", healthy)
    if healthy:
        typer.echo(f"  API Response: {json.dumps(health)}")
    return healthy


def _check_voices(manager: VibeVoiceManager) -> bool:
    """Report the voice catalog size; passes when at least one voice exists."""

    try:
        count = len(manager.voices())
    except Exception as exc:
        echo_task("Fetching available voices", False)
        typer.secho(f"Failed to fetch voices: {exc}", fg=typer.colors.RED, err=True)
        return False

    echo_task("Fetching available voices", count > 0)
    if count > 0:
        typer.echo(f"  Found {count} voice(s) available")
    return count > 0


def _check_generation(manager: VibeVoiceManager) -> bool:
    """Generate a short test file, then delete it."""

    try:
        path = manager.generate_and_save(_TEST_TEXT, "vibevoice_test")
    except Exception as exc:
        echo_task("Testing audio generation", False)
        typer.secho(f"Generation failed: {exc}", fg=typer.colors.RED, err=True)
        return False

    echo_task("Testing audio generation", True)
    typer.echo(f"  Generated test file: {path}")
    if manager.store.exists(path):
        manager.store.delete(path)
        typer.echo("  Test file cleaned up")
    return True


def _check_storage(manager: VibeVoiceManager) -> None:
    """Write and delete a probe file under the storage path."""

    config = manager.config
    probe = f"{config.storage_path.rstrip('/')}/.vibevoice_test"
    label = f"Checking storage ({config.storage_disk}:{config.storage_path})"
    try:
        manager.store.put(probe, b"test")
        manager.store.delete(probe)
    except (OSError, ValueError) as exc:
        echo_task(label, False)
        typer.secho(f"  Storage probe failed: {exc}", fg=typer.colors.YELLOW, err=True)
        return
    echo_task(label, True)


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage the securely stored API key."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            CommandError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "VibeVoice API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                CommandError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                CommandError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        if credential_store.clear_api_key():
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    status = "present" if credential_store.get_api_key() is not None else "not set"
    typer.echo(f"Stored VibeVoice API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
