"""``decode`` and ``encode`` commands."""

from __future__ import annotations

from typing import Annotated
import unicodedata

import typer

from texrecode.core.exceptions import RecodeError

from .._options import RECODING_PANEL, FileOption, SetOption, TextArgument
from ..state import emit_error, get_cli_state
from ..utils import build_recoder, echo_text, read_input, resolve_settings


def decode(
    text: TextArgument = None,
    file: FileOption = None,
    set_name: SetOption = None,
    normalize: Annotated[
        bool | None,
        typer.Option(
            "--normalize/--no-normalize",
            help="Apply Unicode normalization to the decoded text.",
            show_default=False,
            rich_help_panel=RECODING_PANEL,
        ),
    ] = None,
    form: Annotated[
        str | None,
        typer.Option(
            "--form",
            help="Normalization form: NFC, NFD, NFKC or NFKD.",
            rich_help_panel=RECODING_PANEL,
        ),
    ] = None,
    verbatim: Annotated[
        list[str] | None,
        typer.Option(
            "--verbatim",
            help="Field name whose value must never be rewritten. Repeatable.",
            rich_help_panel=RECODING_PANEL,
        ),
    ] = None,
) -> None:
    """Convert LaTeX macros into Unicode."""
    state = get_cli_state()
    settings = resolve_settings(
        state,
        decode_set=set_name,
        normalize=normalize,
        normalization=form,
        verbatim_fields=verbatim,
    )
    payload = read_input(text, file)

    try:
        recoder = build_recoder(state, settings)
        result = recoder.decode(
            payload, normalize=settings.normalize, normalization=settings.normalization
        )
    except RecodeError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    echo_text(result)


def encode(
    text: TextArgument = None,
    file: FileOption = None,
    set_name: SetOption = None,
) -> None:
    """Convert Unicode characters into LaTeX macros."""
    state = get_cli_state()
    settings = resolve_settings(state, encode_set=set_name)
    payload = unicodedata.normalize("NFD", read_input(text, file))

    try:
        recoder = build_recoder(state, settings)
        result = recoder.encode(payload)
    except RecodeError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    echo_text(result)


__all__ = ["decode", "encode"]
