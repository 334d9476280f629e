"""``bib`` command recoding a whole BibTeX file."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

from pybtex.exceptions import PybtexError
import typer

from texrecode.bibliography import (
    RecodedField,
    parse_bibliography,
    recode_bibliography,
    write_bibliography,
)
from texrecode.core.exceptions import RecodeError

from .._options import RECODING_PANEL, OutputOption, SetOption
from ..state import emit_error, get_cli_state
from ..utils import build_recoder, resolve_settings


def _shorten(value: str, limit: int = 60) -> str:
    return value if len(value) <= limit else value[: limit - 1] + "…"


def print_changes(changes: Sequence[RecodedField], *, title: str) -> None:
    """Render recoded fields as a rich table."""
    from rich import box
    from rich.table import Table

    console = get_cli_state().console
    table = Table(title=title, box=box.SQUARE, show_edge=True, header_style="bold cyan")
    table.add_column("Entry", style="magenta", no_wrap=True)
    table.add_column("Field", style="green", no_wrap=True)
    table.add_column("Before")
    table.add_column("After")

    if not changes:
        table.add_row("-", "-", "No fields changed", "-")
    for change in changes:
        table.add_row(change.key, change.field, _shorten(change.before), _shorten(change.after))
    console.print(table)


def bib(
    bibfile: Annotated[
        Path,
        typer.Argument(
            metavar="BIBFILE",
            help="BibTeX file to recode.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    decode: Annotated[
        bool,
        typer.Option(
            "--decode/--encode",
            help="Decode LaTeX to Unicode (default) or encode Unicode to LaTeX.",
            rich_help_panel=RECODING_PANEL,
        ),
    ] = True,
    output: OutputOption = None,
    set_name: SetOption = None,
) -> None:
    """Recode every field of a BibTeX file."""
    state = get_cli_state()
    direction = "decode" if decode else "encode"
    overrides = {"decode_set": set_name} if decode else {"encode_set": set_name}
    settings = resolve_settings(state, **overrides)

    try:
        data = parse_bibliography(bibfile)
        recoder = build_recoder(state, settings)
        changes = recode_bibliography(data, recoder, direction=direction)
    except (RecodeError, PybtexError) as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    print_changes(changes, title=f"{bibfile.name} ({direction})")

    if output is not None:
        try:
            written = write_bibliography(data, output)
        except OSError as exc:
            emit_error(f"Unable to write '{output}': {exc}", exception=exc)
            raise typer.Exit(code=1) from exc
        get_cli_state().err_console.print(f"Wrote {written}")


__all__ = ["bib", "print_changes"]
