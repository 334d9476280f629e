"""``sets`` command listing the recode sets of the active data file."""

from __future__ import annotations

import typer

from texrecode.core.data import load_macro_data
from texrecode.core.exceptions import RecodeError
from texrecode.core.models import Category, MacroDataSet

from ..state import emit_error, get_cli_state


def set_counts(data: MacroDataSet) -> dict[Category, dict[str, int]]:
    """Count definitions per category and recode set."""
    counts: dict[Category, dict[str, int]] = {}
    for definition in data.definitions:
        row = counts.setdefault(definition.category, {})
        for name in definition.sets:
            row[name] = row.get(name, 0) + 1
    return counts


def sets() -> None:
    """List the recode sets with their number of definitions per category."""
    from rich import box
    from rich.table import Table

    state = get_cli_state()
    recode_data = state.recode_data or state.settings.recode_data
    try:
        data = load_macro_data(recode_data)
    except RecodeError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    names = data.available_sets()
    counts = set_counts(data)

    source = str(data.source) if data.source else "bundled data"
    table = Table(
        title=f"Recode sets ({source})",
        box=box.SQUARE,
        show_edge=True,
        header_style="bold cyan",
    )
    table.add_column("Category", style="magenta")
    for name in names:
        table.add_column(name, justify="right")

    for category in Category:
        row = counts.get(category, {})
        table.add_row(category.value, *(str(row.get(name, 0)) for name in names))

    state.console.print(table)


__all__ = ["set_counts", "sets"]
