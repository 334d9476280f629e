"""Immutable records describing LaTeX macro definitions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Category(str, Enum):
    """Closed set of macro classes, each with its own surrounding syntax."""

    LETTERS = "letters"
    DIACRITICS = "diacritics"
    PUNCTUATION = "punctuation"
    SYMBOLS = "symbols"
    NEGATEDSYMBOLS = "negatedsymbols"
    SUPERSCRIPTS = "superscripts"
    CMDSUPERSCRIPTS = "cmdsuperscripts"
    DINGS = "dings"
    GREEK = "greek"

    @classmethod
    def parse(cls, value: str) -> Category:
        """Return the category named by ``value`` (case-insensitive)."""
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown macro category '{value}'.") from exc


DECODE_ORDER: tuple[Category, ...] = (
    Category.GREEK,
    Category.DINGS,
    Category.PUNCTUATION,
    Category.SYMBOLS,
    Category.NEGATEDSYMBOLS,
    Category.SUPERSCRIPTS,
    Category.CMDSUPERSCRIPTS,
    Category.LETTERS,
    Category.DIACRITICS,
)

ENCODE_ORDER: tuple[Category, ...] = (
    Category.GREEK,
    Category.DINGS,
    Category.NEGATEDSYMBOLS,
    Category.SUPERSCRIPTS,
    Category.CMDSUPERSCRIPTS,
    Category.DIACRITICS,
    Category.LETTERS,
    Category.PUNCTUATION,
    Category.SYMBOLS,
)

NULL_SET = "null"


@dataclass(frozen=True, slots=True)
class MacroDefinition:
    """A single macro ⇄ glyph pairing.

    ``macro`` is the macro name without its leading backslash (``ss``, ``'``)
    or, for dings, the two-digit hexadecimal code. ``glyph`` is canonically
    decomposed Unicode text.
    """

    category: Category
    macro: str
    glyph: str
    preferred: bool = False
    raw: bool = False
    sets: frozenset[str] = frozenset()

    def in_set(self, set_name: str) -> bool:
        return set_name in self.sets


@dataclass(frozen=True, slots=True)
class MacroDataSet:
    """All macro definitions plus the per-direction exclusion lists."""

    definitions: tuple[MacroDefinition, ...] = ()
    decode_exclude: frozenset[str] = frozenset()
    encode_exclude: frozenset[str] = frozenset()
    source: Path | None = field(default=None, compare=False)

    @classmethod
    def from_definitions(
        cls,
        definitions: Iterable[MacroDefinition],
        *,
        decode_exclude: Iterable[str] = (),
        encode_exclude: Iterable[str] = (),
        source: Path | None = None,
    ) -> MacroDataSet:
        return cls(
            definitions=tuple(definitions),
            decode_exclude=frozenset(decode_exclude),
            encode_exclude=frozenset(encode_exclude),
            source=source,
        )

    def __len__(self) -> int:
        return len(self.definitions)

    def by_category(self, category: Category) -> tuple[MacroDefinition, ...]:
        """Return the definitions of ``category`` in data order."""
        return tuple(item for item in self.definitions if item.category is category)

    def available_sets(self) -> list[str]:
        """Return every set identifier referenced by at least one definition."""
        names: set[str] = set()
        for item in self.definitions:
            names.update(item.sets)
        return sorted(names)


__all__ = [
    "DECODE_ORDER",
    "ENCODE_ORDER",
    "NULL_SET",
    "Category",
    "MacroDataSet",
    "MacroDefinition",
]
