"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
settings tables, and voice listings.
"""

from __future__ import annotations

import json
from typing import NoReturn, Sequence

import typer

from .errors import CommandError, VibeVoiceError
from .models.datatypes import Voice


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, CommandError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    elif isinstance(exc, VibeVoiceError):
        typer.secho(
            f"{command_name} failed ({type(exc).__name__}, code {exc.code}): {exc}",
            fg=typer.colors.RED,
            err=True,
        )
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_rows(rows: Sequence[tuple[str, str]]) -> None:
    """Print aligned two-column `label: value` rows."""

    if not rows:
        return
    width = max(len(label) for label, _value in rows)
    for label, value in rows:
        typer.echo(f"  {label.ljust(width)}  {value}")


def echo_task(label: str, ok: bool) -> None:
    """Print one check line with a pass/fail marker."""

    marker = "DONE" if ok else "FAIL"
    color = typer.colors.GREEN if ok else typer.colors.RED
    typer.echo(f"{label} ... ", nl=False)
    typer.secho(marker, fg=color)


def filter_voices(
    voices: Sequence[Voice],
    language: str | None = None,
    gender: str | None = None,
) -> list[Voice]:
    """Filter voices by language substring and exact gender, both case-insensitive."""

    selected = list(voices)
    if language:
        needle = language.lower()
        selected = [voice for voice in selected if needle in voice.language.lower()]
    if gender:
        wanted = gender.lower()
        selected = [voice for voice in selected if voice.gender.lower() == wanted]
    return selected


def echo_voice_json(voices: Sequence[Voice]) -> None:
    """Print voices as an indented JSON array."""

    typer.echo(json.dumps([voice.to_dict() for voice in voices], indent=4))


def echo_voice_table(voices: Sequence[Voice], default_voice: str) -> None:
    """Print voices as a fixed-width table followed by totals."""

    header = ("ID", "Name", "Language", "Gender", "Description")
    rows = [
        (voice.id, voice.name, voice.language, voice.gender, voice.description or "-")
        for voice in voices
    ]
    widths = [
        max(len(str(row[index])) for row in [header, *rows])
        for index in range(len(header))
    ]
    for row in [header, *rows]:
        cells = (str(cell).ljust(widths[index]) for index, cell in enumerate(row))
        typer.echo("  ".join(cells).rstrip())
    typer.echo("")
    typer.echo(f"Total: {len(voices)} voice(s)")
    typer.echo(f"Default voice: {default_voice}")
