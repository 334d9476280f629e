"""Custom exception hierarchy for the LaTeX recoding engine."""

from __future__ import annotations


class RecodeError(RuntimeError):
    """Base exception for recoding failures."""


class ConfigurationError(RecodeError):
    """Raised when a recode set or its backing data cannot produce a usable table."""


class DataError(RecodeError, ValueError):
    """Raised when a macro definition is malformed and must be rejected."""

    def __init__(self, message: str, *, macro: str | None = None, category: str | None = None):
        super().__init__(message)
        self.macro = macro
        self.category = category


class TablesNotInitialisedError(RecodeError):
    """Raised when decode or encode is called before the recode sets were initialised."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "ConfigurationError",
    "DataError",
    "RecodeError",
    "TablesNotInitialisedError",
    "exception_hint",
    "exception_messages",
]
