"""LaTeX → Unicode decoding.

Decoding runs a fixed sequence of rewrites over the whole input:

1. fast-path exits (identity table, nothing that looks like a macro),
2. verbatim protection,
3. ``\\char`` escapes,
4. macro boundary disambiguation,
5. one pass per category in :data:`DECODE_ORDER`,
6. inline-math unwrapping of single decoded glyphs,
7. removal of braces around single accented letters,
8. normalization and verbatim restoration.

Unknown macros are left untouched; they belong to the document, not to us.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
import re
from typing import Literal
import unicodedata

from .models import DECODE_ORDER, Category
from .tables import CategoryTable, RecodeTable
from .unicode import (
    is_ascii_letter,
    is_glyph_cluster,
    is_letter,
    is_letter_cluster,
    mark_run_end,
)
from .verbatim import VerbatimFields, VerbatimGuard


logger = logging.getLogger(__name__)

NormalizationForm = Literal["NFC", "NFD", "NFKC", "NFKD"]
NORMALIZATION_FORMS: tuple[str, ...] = ("NFC", "NFD", "NFKC", "NFKD")

_CHAR_HEX = re.compile(r'\\char\s*"([0-9A-Fa-f]+)')
_CHAR_OCT = re.compile(r"\\char\s*'([0-7]+)")
_CHAR_DEC = re.compile(r"\\char\s*([0-9]+)")

# \foo\ bar -> \foo{} bar
_CONTROL_SPACE = re.compile(r"(\\[a-zA-Z]+)\\(\s+)")
# Aaaa\o, -> Aaaa\o{},
_SHORT_MACRO_PUNCT = re.compile(r"(?<!\{)(\\\w)(?=[;,.:%])")

_DING = re.compile(r"\\ding\{([2-9A-Fa-f][0-9A-Fa-f])\}")
_INLINE_MATH = re.compile(r"\{\$([^${}\\]+)\$\}")
_BRACED_CANDIDATE = re.compile(r"\{([^{}\\\s]+)\}")

# Dotless letters written under an accent stand for the plain letter.
_DOTLESS = {"ı": "i", "ȷ": "j", "\\i": "i", "\\j": "j"}
_DOTLESS_MACRO = re.compile(r"\\([ij])(?![a-zA-Z])")
_UNBRACED_FORBIDDEN = frozenset("{}\\")


def _from_code_point(value: int, original: str) -> str:
    try:
        return chr(value)
    except (ValueError, OverflowError):
        return original


def replace_char_escapes(text: str) -> str:
    """Turn ``\\char"HH``, ``\\char'OOO`` and ``\\char DDD`` into characters."""
    if "\\char" not in text:
        return text
    text = _CHAR_HEX.sub(lambda m: _from_code_point(int(m.group(1), 16), m.group(0)), text)
    text = _CHAR_OCT.sub(lambda m: _from_code_point(int(m.group(1), 8), m.group(0)), text)
    return _CHAR_DEC.sub(lambda m: _from_code_point(int(m.group(1)), m.group(0)), text)


def disambiguate_boundaries(text: str) -> str:
    """Insert ``{}`` where a macro name would otherwise swallow what follows."""
    text = _CONTROL_SPACE.sub(r"\1{}\2", text)
    return _SHORT_MACRO_PUNCT.sub(r"\1{}", text)


def unwrap_inline_math(text: str) -> str:
    """Replace ``{$G$}`` by ``G`` when ``G`` is a single decoded glyph."""

    def _repl(match: re.Match[str]) -> str:
        content = match.group(1)
        return content if is_glyph_cluster(content) else match.group(0)

    return _INLINE_MATH.sub(_repl, text)


def _preceded_by_macro(text: str, index: int) -> bool:
    """Return whether ``text[:index]`` ends with a macro name (``\\foo`` or ``\\~``)."""
    if index >= 2 and text[index - 2] == "\\" and not is_letter(text[index - 1]):
        return True
    cursor = index
    while cursor > 0 and is_letter(text[cursor - 1]):
        cursor -= 1
    return cursor < index and cursor > 0 and text[cursor - 1] == "\\"


def strip_accent_braces(text: str) -> str:
    """Drop braces wrapping exactly one accented letter.

    ``{é}`` becomes ``é`` unless the braces are the argument of a macro, as in
    ``\\textupper{é}``.
    """

    def _repl(match: re.Match[str]) -> str:
        content = match.group(1)
        if not is_letter_cluster(content, min_marks=1):
            return match.group(0)
        if _preceded_by_macro(match.string, match.start()):
            return match.group(0)
        return content

    return _BRACED_CANDIDATE.sub(_repl, text)


def admits_unbraced(macro: str, spaced: bool, char: str) -> bool:
    """Decide whether an unbraced accent macro applies to ``char``.

    A macro whose name does not end in an ASCII letter (``\\=``) takes any
    following letter. A macro ending in a letter (``\\c``) takes a letter only
    after a space (``\\c c``), and a non-letter only without one (``\\c-``), so
    ``\\cite`` is never read as ``\\c`` applied to ``ite``.
    """
    if not char or char.isspace() or char in _UNBRACED_FORBIDDEN:
        return False
    if not is_ascii_letter(macro[-1:]):
        return is_letter(char)
    if spaced:
        return is_letter(char)
    return not is_ascii_letter(char)


def _accent_base(base: str) -> str:
    return _DOTLESS.get(base, base)


class LatexDecoder:
    """Decode LaTeX macros into Unicode using one decode table."""

    def __init__(self, table: RecodeTable, verbatim: VerbatimFields | None = None) -> None:
        self._table = table
        self._verbatim = verbatim
        self._handlers: dict[Category, Callable[[str, CategoryTable], str]] = {
            Category.GREEK: self._substitute,
            Category.DINGS: self._decode_dings,
            Category.PUNCTUATION: self._substitute,
            Category.SYMBOLS: self._substitute,
            Category.NEGATEDSYMBOLS: self._substitute,
            Category.SUPERSCRIPTS: self._substitute,
            Category.CMDSUPERSCRIPTS: self._substitute,
            Category.LETTERS: self._substitute,
            Category.DIACRITICS: self._decode_diacritics,
        }
        self._patterns: dict[Category, re.Pattern[str]] = {}
        for category, category_table in table.categories.items():
            pattern = self._compile(category, category_table)
            if pattern is not None:
                self._patterns[category] = pattern
        self._unbraced: re.Pattern[str] | None = None
        diacritics = table.get(Category.DIACRITICS)
        if diacritics is not None:
            self._unbraced = re.compile(rf"\\({diacritics.pattern.pattern})(\s*)")

    @property
    def table(self) -> RecodeTable:
        return self._table

    @staticmethod
    def _compile(category: Category, table: CategoryTable) -> re.Pattern[str] | None:
        alternation = table.pattern.pattern
        if category is Category.NEGATEDSYMBOLS:
            return re.compile(rf"\\not\\({alternation})")
        if category is Category.SUPERSCRIPTS:
            return re.compile(rf"\\textsuperscript\{{({alternation})\}}")
        if category is Category.CMDSUPERSCRIPTS:
            return re.compile(rf"\\textsuperscript\{{\\({alternation})\}}")
        if category is Category.LETTERS:
            return re.compile(rf"\\({alternation})(?:\{{\}}|\s+|\b)")
        if category in (Category.PUNCTUATION, Category.SYMBOLS, Category.GREEK):
            # \not\foo is left whole for the negated symbols pass
            return re.compile(rf"(?<!\\not)\\({alternation})(?:\{{\}}|\s+|\b)")
        if category is Category.DIACRITICS:
            return re.compile(rf"\\({alternation})\s*\{{(\\[ij]|[^{{}}\\]+)\}}")
        return None

    def _should_skip(self, text: str) -> bool:
        if self._table.is_identity:
            return True
        if "\\" in text:
            return False
        if self._verbatim is None:
            return True
        marker = self._verbatim.marker_pattern
        return marker is None or marker.search(text) is None

    def decode(
        self,
        text: str,
        *,
        normalize: bool = True,
        normalization: NormalizationForm | str = "NFD",
    ) -> str:
        """Return ``text`` with every recognised macro replaced by Unicode."""
        if normalize and normalization not in NORMALIZATION_FORMS:
            raise ValueError(f"Unknown normalization form '{normalization}'.")
        if self._should_skip(text):
            return text

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("String before latex_decode() -> '%s'", text)

        guard = VerbatimGuard(self._verbatim)
        text = guard.protect(text)
        text = replace_char_escapes(text)
        text = disambiguate_boundaries(text)

        for category in DECODE_ORDER:
            category_table = self._table.get(category)
            if category_table is None:
                continue
            text = self._handlers[category](text, category_table)

        text = unwrap_inline_math(text)
        text = strip_accent_braces(text)

        if normalize:
            text = unicodedata.normalize(normalization, text)
        text = guard.restore(text)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("String in latex_decode() now -> '%s'", text)
        return text

    def _substitute(self, text: str, table: CategoryTable) -> str:
        pattern = self._patterns.get(table.category)
        if pattern is None:
            return text
        mapping = table.mapping
        return pattern.sub(lambda match: mapping[match.group(1)], text)

    def _decode_dings(self, text: str, table: CategoryTable) -> str:
        mapping = table.mapping

        def _repl(match: re.Match[str]) -> str:
            return mapping.get(match.group(1).upper(), match.group(0))

        return _DING.sub(_repl, text)

    def _decode_diacritics(self, text: str, table: CategoryTable) -> str:
        # An unbraced accent can leave a braced one decodable, as in \~{\^a}.
        while True:
            decoded = self._decode_braced_accents(text, table)
            decoded = self._decode_unbraced_accents(decoded, table)
            if decoded == text:
                return text
            text = decoded

    def _decode_braced_accents(self, text: str, table: CategoryTable) -> str:
        pattern = self._patterns.get(Category.DIACRITICS)
        if pattern is None:
            return text
        mapping = table.mapping

        def _repl(match: re.Match[str]) -> str:
            macro, content = match.groups()
            content = _DOTLESS.get(content, content)
            if not is_letter_cluster(content):
                return match.group(0)
            return _accent_base(content[0]) + content[1:] + mapping[macro]

        # Nested accents resolve innermost first, one level per round.
        while True:
            decoded = pattern.sub(_repl, text)
            if decoded == text:
                return text
            text = decoded

    def _unbraced_target(self, text: str, position: int) -> tuple[str, int] | None:
        """Return the base character at ``position`` and where it ends."""
        dotless = _DOTLESS_MACRO.match(text, position)
        if dotless is not None:
            return dotless.group(1), dotless.end()
        if position >= len(text):
            return None
        return text[position], position + 1

    def _decode_unbraced_accents(self, text: str, table: CategoryTable) -> str:
        if self._unbraced is None:
            return text
        mapping = table.mapping
        pieces: list[str] = []
        cursor = 0
        for match in self._unbraced.finditer(text):
            if match.start() < cursor:
                continue
            macro, spacing = match.groups()
            candidates = [(macro, bool(spacing), match.end())]
            # Shorter macro names that prefix the matched one, as a backtracking
            # regular expression would have tried them.
            for length in range(len(macro) - 1, 0, -1):
                if macro[:length] in mapping:
                    candidates.append((macro[:length], False, match.start() + 1 + length))

            for name, spaced, position in candidates:
                target = self._unbraced_target(text, position)
                if target is None:
                    continue
                base, base_end = target
                if base_end == position + 1 and not admits_unbraced(name, spaced, base):
                    continue
                end = mark_run_end(text, base_end)
                pieces.append(text[cursor : match.start()])
                pieces.append(_accent_base(base) + text[base_end:end])
                pieces.append(mapping[name])
                cursor = end
                break

        if not pieces:
            return text
        pieces.append(text[cursor:])
        return "".join(pieces)


def decode_text(
    text: str,
    table: RecodeTable,
    *,
    verbatim: VerbatimFields | None = None,
    normalize: bool = True,
    normalization: NormalizationForm | str = "NFD",
) -> str:
    """Functional shortcut around :class:`LatexDecoder`."""
    return LatexDecoder(table, verbatim).decode(
        text, normalize=normalize, normalization=normalization
    )


__all__ = [
    "NORMALIZATION_FORMS",
    "LatexDecoder",
    "NormalizationForm",
    "admits_unbraced",
    "decode_text",
    "disambiguate_boundaries",
    "replace_char_escapes",
    "strip_accent_braces",
    "unwrap_inline_math",
]
