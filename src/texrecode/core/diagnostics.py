"""Diagnostic abstractions shared by the table builder and the recoder."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Emitter that forwards diagnostics to the standard logging module."""

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None and self.debug_enabled:
            self._logger.warning(message, exc_info=exc)
        else:
            self._logger.warning(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None and self.debug_enabled:
            self._logger.error(message, exc_info=exc)
        else:
            self._logger.error(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message:
            self._logger.info(message)
            return
        self._logger.debug("diagnostic event %s: %s", name, dict(payload))


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected diagnostic events."""
    data = dict(payload)

    if name == "recode_tables_built":
        direction = data.get("direction") or "<unknown>"
        set_name = data.get("set") or "<unknown>"
        counts = data.get("counts") or {}
        total = sum(int(value) for value in counts.values())
        populated = sorted(str(key) for key, value in counts.items() if value)
        suffix = f" ({', '.join(populated)})" if populated else ""
        return f"Built {direction} table for set '{set_name}': {total} entries{suffix}"

    if name == "recode_set_empty":
        direction = data.get("direction") or "<unknown>"
        set_name = data.get("set") or "<unknown>"
        return f"No {direction} mappings for set '{set_name}'; using identity recoding"

    if name == "recode_data_loaded":
        source = data.get("source") or "<bundled>"
        count = data.get("count", 0)
        return f"Loaded {count} macro definitions from {source}"

    return None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "format_event_message",
]
