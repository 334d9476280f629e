"""Character class predicates used by the decoder and encoder scanners."""

from __future__ import annotations

import unicodedata


def is_letter(char: str) -> bool:
    """Return whether ``char`` is a Unicode letter (general category L*)."""
    return bool(char) and unicodedata.category(char).startswith("L")


def is_mark(char: str) -> bool:
    """Return whether ``char`` is a combining mark (general category M*)."""
    return bool(char) and unicodedata.category(char).startswith("M")


def is_ascii_letter(char: str) -> bool:
    return len(char) == 1 and char.isascii() and char.isalpha()


def mark_run_end(text: str, start: int) -> int:
    """Return the index just past the combining marks starting at ``start``."""
    end = start
    while end < len(text) and is_mark(text[end]):
        end += 1
    return end


def is_letter_cluster(text: str, *, min_marks: int = 0) -> bool:
    """Return whether ``text`` is one letter followed only by combining marks."""
    if not text or not is_letter(text[0]):
        return False
    marks = text[1:]
    return len(marks) >= min_marks and all(is_mark(char) for char in marks)


def is_glyph_cluster(text: str) -> bool:
    """Return whether ``text`` is one non-mark character plus marks.

    A bare ASCII character does not count; ``=`` followed by a combining
    overlay (the decomposition of ``≠``) does.
    """
    if not text or is_mark(text[0]):
        return False
    if not all(is_mark(char) for char in text[1:]):
        return False
    return len(text) > 1 or not text.isascii()


__all__ = [
    "is_ascii_letter",
    "is_glyph_cluster",
    "is_letter",
    "is_letter_cluster",
    "is_mark",
    "mark_run_end",
]
