"""Unicode → LaTeX encoding.

Encoding runs one pass per category in :data:`ENCODE_ORDER`. Every pass but
the diacritics one is a plain alternation substitution over the glyphs of the
active table. Diacritics are handled by a scanner that groups a base
character with the combining marks that follow it and nests one accent macro
per mapped mark, innermost first::

    "ḗ" (e + U+0304 + U+0301)  ->  \\'{\\={e}}

Output is never normalized and verbatim values get no protection here; callers
exclude verbatim fields before encoding.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
import re

from .models import ENCODE_ORDER, Category
from .tables import CategoryTable, RecodeTable
from .unicode import is_letter, is_mark, mark_run_end


logger = logging.getLogger(__name__)

TEXT_MACRO_PREFIX = "text"

# Characters that are LaTeX syntax themselves and can never carry an accent.
_UNACCENTABLE = frozenset("{}\\$")


def _needs_terminator(text: str, index: int) -> bool:
    """Return whether a control word ending before ``index`` needs ``{}``."""
    if index >= len(text):
        return False
    char = text[index]
    return char.isalnum() or char.isspace()


class LatexEncoder:
    """Encode Unicode text into LaTeX macros using one encode table."""

    def __init__(self, table: RecodeTable) -> None:
        self._table = table
        self._handlers: dict[Category, Callable[[str, CategoryTable], str]] = {
            Category.GREEK: self._encode_textual,
            Category.DINGS: self._encode_dings,
            Category.NEGATEDSYMBOLS: self._encode_negated,
            Category.SUPERSCRIPTS: self._encode_superscripts,
            Category.CMDSUPERSCRIPTS: self._encode_cmdsuperscripts,
            Category.DIACRITICS: self._encode_diacritics,
            Category.LETTERS: self._encode_letters,
            Category.PUNCTUATION: self._encode_textual,
            Category.SYMBOLS: self._encode_textual,
        }

    @property
    def table(self) -> RecodeTable:
        return self._table

    def encode(self, text: str) -> str:
        """Return ``text`` with every mapped glyph replaced by its macro."""
        if self._table.is_identity or not text:
            return text

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("String before latex_encode() -> '%s'", text)

        for category in ENCODE_ORDER:
            category_table = self._table.get(category)
            if category_table is None:
                continue
            text = self._handlers[category](text, category_table)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("String in latex_encode() now -> '%s'", text)
        return text

    @staticmethod
    def _substitute(
        text: str, table: CategoryTable, render: Callable[[re.Match[str], str], str]
    ) -> str:
        mapping = table.mapping
        return table.pattern.sub(lambda match: render(match, mapping[match.group(0)]), text)

    def _encode_negated(self, text: str, table: CategoryTable) -> str:
        return self._substitute(text, table, lambda _, macro: f"{{$\\not\\{macro}$}}")

    def _encode_superscripts(self, text: str, table: CategoryTable) -> str:
        return self._substitute(text, table, lambda _, macro: f"\\textsuperscript{{{macro}}}")

    def _encode_cmdsuperscripts(self, text: str, table: CategoryTable) -> str:
        return self._substitute(text, table, lambda _, macro: f"\\textsuperscript{{\\{macro}}}")

    def _encode_dings(self, text: str, table: CategoryTable) -> str:
        return self._substitute(text, table, lambda _, code: f"\\ding{{{code}}}")

    def _encode_letters(self, text: str, table: CategoryTable) -> str:
        def _render(match: re.Match[str], macro: str) -> str:
            if table.is_raw(match.group(0)):
                return macro
            return f"\\{macro}{{}}"

        return self._substitute(text, table, _render)

    def _encode_textual(self, text: str, table: CategoryTable) -> str:
        """Greek, punctuation and symbols: text macro, raw text or inline math."""

        def _render(match: re.Match[str], macro: str) -> str:
            if macro.startswith(TEXT_MACRO_PREFIX):
                if _needs_terminator(match.string, match.end()):
                    return f"\\{macro}{{}}"
                return f"\\{macro}"
            if table.is_raw(match.group(0)):
                return macro
            return f"{{$\\{macro}$}}"

        return self._substitute(text, table, _render)

    def _encode_diacritics(self, text: str, table: CategoryTable) -> str:
        mapping = table.mapping
        if not any(char in mapping for char in text):
            return text

        pieces: list[str] = []
        index = 0
        length = len(text)
        while index < length:
            base, base_end = _cluster_base(text, index, mapping)
            if base is None:
                # stray mark with nothing to sit on
                pieces.append(text[index])
                index += 1
                continue
            end = mark_run_end(text, base_end)
            marks = text[base_end:end]
            if not marks or base in _UNACCENTABLE or not any(m in mapping for m in marks):
                pieces.append(text[index:end])
            else:
                pieces.append(nest_accents(base, marks, mapping))
            index = end
        return "".join(pieces)


def _cluster_base(
    text: str, index: int, mapping: Mapping[str, str]
) -> tuple[str | None, int]:
    """Return the accent base starting at ``index`` and the index after it.

    A single braced letter directly followed by a mapped mark (``{a}`` + U+0301)
    counts as a base of its own.
    """
    char = text[index]
    if (
        char == "{"
        and index + 3 < len(text)
        and text[index + 2] == "}"
        and is_letter(text[index + 1])
        and text[index + 3] in mapping
    ):
        return text[index + 1], index + 3
    if is_mark(char):
        return None, index + 1
    return char, index + 1


def nest_accents(base: str, marks: str, mapping: Mapping[str, str]) -> str:
    """Wrap ``base`` in one accent macro per mapped mark, innermost first.

    A plain ``i`` under a mapped accent is written as the dotless ``\\i``.
    Marks without a mapping stay in place as literal characters.
    """
    result = "\\i" if base == "i" and marks[0] in mapping else base
    for mark in marks:
        macro = mapping.get(mark)
        if macro is None:
            result += mark
        else:
            result = f"\\{macro}{{{result}}}"
    return result


def encode_text(text: str, table: RecodeTable) -> str:
    """Functional shortcut around :class:`LatexEncoder`."""
    return LatexEncoder(table).encode(text)


__all__ = [
    "TEXT_MACRO_PREFIX",
    "LatexEncoder",
    "encode_text",
    "nest_accents",
]
