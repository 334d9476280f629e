"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
RECODING_PANEL = "Recoding"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

TextArgument = Annotated[
    str | None,
    typer.Argument(
        metavar="TEXT",
        help="Text to recode. Reads --file or standard input when omitted.",
        show_default=False,
    ),
]

FileOption = Annotated[
    Path | None,
    typer.Option(
        "--file",
        "-f",
        help="Read the text to recode from this file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

SetOption = Annotated[
    str | None,
    typer.Option(
        "--set",
        "-s",
        help="Recode set to use (for example 'base', 'full' or 'null').",
        rich_help_panel=RECODING_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug/--no-debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML file holding recode settings.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
    ),
]

RecodeDataOption = Annotated[
    Path | None,
    typer.Option(
        "--recode-data",
        help="User-defined recode data file (looked up with kpsewhich if not a path).",
    ),
]

OutputOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Write the recoded bibliography to this file.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]
