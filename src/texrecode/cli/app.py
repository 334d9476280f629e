"""Typer application wiring for the texrecode CLI."""

from __future__ import annotations

from typing import Annotated

import typer

from texrecode.core.config import load_settings
from texrecode.core.exceptions import RecodeError, exception_hint
from texrecode.version import get_version

from ._options import ConfigOption, DebugOption, RecodeDataOption, VerboseOption
from .commands import bib, decode, encode, sets
from .state import debug_enabled, emit_error, get_cli_state, install_cli_state


app = typer.Typer(
    help="Convert between LaTeX macros and Unicode text.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(get_version())
        raise typer.Exit()


@app.callback()
def configure(
    ctx: typer.Context,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
    config: ConfigOption = None,
    recode_data: RecodeDataOption = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the installed version and exit.",
        ),
    ] = False,
) -> None:
    """Convert between LaTeX macros and Unicode text."""
    state = install_cli_state(ctx, verbosity=verbose, debug=debug, recode_data=recode_data)
    if config is None:
        return
    try:
        state.settings = load_settings(config)
    except RecodeError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


app.command()(decode)
app.command()(encode)
app.command()(bib)
app.command()(sets)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - defensive catch-all
        state = get_cli_state()
        if state.show_tracebacks:
            from rich.traceback import Traceback

            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(exception_hint(exc) or str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
