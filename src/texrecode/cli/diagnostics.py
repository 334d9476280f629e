"""Recoder diagnostics rendered on the CLI error console."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from texrecode.core.diagnostics import format_event_message

from .state import CLIState, render_message


class CliEmitter:
    """Report table build problems and progress for one CLI invocation.

    Rejected definitions and unusable sets are printed as they happen. Known
    events become ``-v`` progress lines; other events are dropped.
    """

    def __init__(self, state: CLIState) -> None:
        self._state = state
        self.debug_enabled = state.show_tracebacks

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        render_message("warning", message, exception=exc, state=self._state)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        render_message("error", message, exception=exc, state=self._state)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        if self._state.verbosity < 1:
            return
        message = format_event_message(name, payload)
        if message is not None:
            render_message("info", message, state=self._state)


__all__ = ["CliEmitter"]
