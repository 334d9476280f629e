"""Per-invocation CLI state.

The root callback installs a fresh :class:`CLIState` for every invocation and
attaches it to the Typer context. Commands and diagnostic helpers find it
again through the context chain or, outside of a context, through a context
variable holding the state of the running invocation.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
from pathlib import Path
import sys
from typing import TYPE_CHECKING, Any

from texrecode.core.config import RecodeSettings
from texrecode.core.exceptions import DataError, exception_messages


if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "CLIState",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "install_cli_state",
    "render_message",
]

_LEVEL_STYLES = {"error": "red", "warning": "yellow"}


@dataclass(slots=True)
class CLIState:
    """Options of one CLI invocation and the consoles it reports to."""

    verbosity: int = 0
    show_tracebacks: bool = False
    settings: RecodeSettings = field(default_factory=RecodeSettings)
    recode_data: Path | None = None
    _console: Console | None = field(default=None, init=False, repr=False)
    _err_console: Console | None = field(default=None, init=False, repr=False)

    @property
    def console(self) -> Console:
        """Console bound to the current ``sys.stdout``."""
        from rich.console import Console

        if self._console is None or self._console.file is not sys.stdout:
            self._console = Console(file=sys.stdout)
        return self._console

    @property
    def err_console(self) -> Console:
        """Console bound to the current ``sys.stderr``."""
        from rich.console import Console

        if self._err_console is None or self._err_console.file is not sys.stderr:
            self._err_console = Console(file=sys.stderr, highlight=False)
        return self._err_console


_STATE_VAR: ContextVar[CLIState | None] = ContextVar("texrecode_cli_state", default=None)


def install_cli_state(
    ctx: Any = None,
    *,
    verbosity: int = 0,
    debug: bool = False,
    recode_data: Path | None = None,
) -> CLIState:
    """Create the state of a new invocation and make it the current one."""
    state = CLIState(
        verbosity=max(0, verbosity),
        show_tracebacks=debug,
        recode_data=recode_data,
    )
    if ctx is not None:
        ctx.obj = state
    _STATE_VAR.set(state)
    return state


def get_cli_state(ctx: Any = None, *, create: bool = True) -> CLIState:
    """Return the state attached to ``ctx`` or its parents, else the current one.

    Contexts are walked through their ``obj`` and ``parent`` attributes so the
    lookup works with whichever click distribution Typer runs on.
    """
    current = ctx
    while current is not None:
        obj = getattr(current, "obj", None)
        if isinstance(obj, CLIState):
            return obj
        current = getattr(current, "parent", None)

    state = _STATE_VAR.get()
    if state is None:
        if not create:
            raise RuntimeError("CLI state is not initialised for this context.")
        state = CLIState()
        _STATE_VAR.set(state)
    return state


def render_message(
    level: str,
    message: str,
    *,
    exception: BaseException | None = None,
    state: CLIState | None = None,
) -> None:
    """Write a diagnostic to stderr.

    ``info`` messages are shown from ``-v`` on. Warnings and errors always
    print; ``-v`` adds the messages of the exception chain and ``-vv`` the
    macro and category of a rejected definition.
    """
    state = state or get_cli_state()

    if level == "info":
        if state.verbosity >= 1:
            state.err_console.print(message, style="dim", markup=False)
        return

    from rich.text import Text

    style = _LEVEL_STYLES.get(level, "yellow")
    text = Text.assemble((f"{level}: ", f"bold {style}"), (message, style))

    if exception is not None and state.verbosity >= 1:
        details = [entry for entry in exception_messages(exception) if entry not in message]
        if isinstance(exception, DataError) and state.verbosity >= 2:
            details.append(f"macro {exception.macro!r} in {exception.category or '?'}")
        for entry in details:
            text.append(f"\n  {entry}", style=style)

    state.err_console.print(text)


def emit_warning(message: str, *, exception: BaseException | None = None) -> None:
    render_message("warning", message, exception=exception)


def emit_error(message: str, *, exception: BaseException | None = None) -> None:
    render_message("error", message, exception=exception)


def debug_enabled() -> bool:
    """Return whether full tracebacks should be displayed."""
    try:
        return get_cli_state(create=False).show_tracebacks
    except RuntimeError:
        return False
