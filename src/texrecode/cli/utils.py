"""Helpers shared by the recoding commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
import typer

from texrecode.core.config import RecodeSettings
from texrecode.core.recoder import Recoder

from .diagnostics import CliEmitter
from .state import CLIState


def read_input(text: str | None, file: Path | None) -> str:
    """Return the text to recode from the argument, a file or standard input."""
    if text is not None and file is not None:
        raise typer.BadParameter("Provide either TEXT or --file, not both.")
    if text is not None:
        return text
    if file is not None:
        try:
            return file.read_text(encoding="utf-8")
        except OSError as exc:
            raise typer.BadParameter(f"Unable to read '{file}': {exc}") from exc
    return click.get_text_stream("stdin").read()


def resolve_settings(state: CLIState, **overrides: Any) -> RecodeSettings:
    """Merge command line overrides into the settings held by the CLI state."""
    payload = state.settings.model_dump()
    payload.update({key: value for key, value in overrides.items() if value is not None})
    if state.recode_data is not None:
        payload["recode_data"] = state.recode_data
    try:
        return RecodeSettings.model_validate(payload)
    except ValidationError as exc:
        messages = "; ".join(error["msg"] for error in exc.errors())
        raise typer.BadParameter(messages) from exc


def build_recoder(state: CLIState, settings: RecodeSettings) -> Recoder:
    """Create a recoder reporting through the CLI emitter."""
    return Recoder.from_settings(settings, emitter=CliEmitter(state))


def echo_text(text: str) -> None:
    """Print recoded text without doubling a trailing newline."""
    typer.echo(text, nl=not text.endswith("\n"))


__all__ = ["build_recoder", "echo_text", "read_input", "resolve_settings"]
