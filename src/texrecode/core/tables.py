"""Build the decode and encode lookup tables from macro definitions.

A table is built per direction and per recode set. Each category gets its
own mapping (keyed by macro text when decoding, by glyph when encoding) and a
compiled alternation over the mapping keys. Decode alternatives are ordered by
descending length so that ``\\sscript`` is never read as ``\\ss`` followed by
``cript``.

Tables are immutable once built. Reconfiguring means building new tables and
discarding the old ones, never patching them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import re
from types import MappingProxyType
from typing import Literal

from .diagnostics import DiagnosticEmitter, LoggingEmitter
from .exceptions import ConfigurationError, DataError
from .models import NULL_SET, Category, MacroDataSet, MacroDefinition


Direction = Literal["decode", "encode"]

_DING_CODE = re.compile(r"[0-9A-F]{2}")


@dataclass(frozen=True, slots=True)
class CategoryTable:
    """Lookup data for one category in one direction."""

    category: Category
    mapping: Mapping[str, str]
    pattern: re.Pattern[str]
    raw: frozenset[str] = frozenset()

    def __len__(self) -> int:
        return len(self.mapping)

    def is_raw(self, key: str) -> bool:
        return key in self.raw


@dataclass(frozen=True, slots=True)
class RecodeTable:
    """All category tables for one direction and recode set."""

    direction: Direction
    set_name: str
    categories: Mapping[Category, CategoryTable] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def identity(cls, direction: Direction, set_name: str = NULL_SET) -> RecodeTable:
        """Return a table that leaves text untouched."""
        return cls(direction=direction, set_name=set_name)

    @property
    def is_identity(self) -> bool:
        return not self.categories

    def get(self, category: Category) -> CategoryTable | None:
        return self.categories.get(category)

    def counts(self) -> dict[str, int]:
        return {category.value: len(table) for category, table in self.categories.items()}


@dataclass(frozen=True, slots=True)
class RecodeTables:
    """Decode/encode table pair produced by one configuration."""

    decode: RecodeTable
    encode: RecodeTable
    issues: tuple[DataError, ...] = ()


def compile_alternation(keys: Iterable[str]) -> re.Pattern[str]:
    """Compile keys into a longest-alternative-first regular expression."""
    ordered = sorted(set(keys), key=lambda key: (-len(key), key))
    return re.compile("|".join(re.escape(key) for key in ordered))


def validate_definition(definition: MacroDefinition) -> None:
    """Raise :class:`DataError` when ``definition`` cannot be tabulated."""
    category = getattr(definition, "category", None)
    if not isinstance(category, Category):
        raise DataError(
            f"Macro definition has an unknown category: {category!r}.",
            macro=definition.macro or None,
        )
    if not definition.macro:
        raise DataError(
            f"Macro definition for glyph {definition.glyph!r} has no macro text.",
            category=category.value,
        )
    if not definition.glyph:
        raise DataError(
            f"Macro definition '{definition.macro}' has no glyph text.",
            macro=definition.macro,
            category=category.value,
        )
    if category is Category.DINGS and not _DING_CODE.fullmatch(definition.macro.upper()):
        raise DataError(
            f"Ding code '{definition.macro}' is not a two digit hexadecimal code.",
            macro=definition.macro,
            category=category.value,
        )


def _accepted_definitions(
    data: MacroDataSet,
    set_name: str,
    emitter: DiagnosticEmitter,
    issues: list[DataError],
) -> list[MacroDefinition]:
    accepted: list[MacroDefinition] = []
    for definition in data.definitions:
        if not definition.in_set(set_name):
            continue
        try:
            validate_definition(definition)
        except DataError as exc:
            if not any(str(known) == str(exc) for known in issues):
                issues.append(exc)
                emitter.error(f"Rejected macro definition: {exc}", exc)
            continue
        accepted.append(definition)
    return accepted


def _decode_key(definition: MacroDefinition) -> str:
    if definition.category is Category.DINGS:
        return definition.macro.upper()
    return definition.macro


def _freeze(
    mappings: Mapping[Category, dict[str, str]],
    raw: Mapping[Category, set[str]] | None = None,
) -> Mapping[Category, CategoryTable]:
    tables: dict[Category, CategoryTable] = {}
    for category in Category:
        mapping = mappings.get(category)
        if not mapping:
            continue
        tables[category] = CategoryTable(
            category=category,
            mapping=MappingProxyType(dict(mapping)),
            pattern=compile_alternation(mapping),
            raw=frozenset((raw or {}).get(category, ())) & frozenset(mapping),
        )
    return MappingProxyType(tables)


def _build_decode(
    definitions: list[MacroDefinition], exclude: frozenset[str]
) -> Mapping[Category, CategoryTable]:
    mappings: dict[Category, dict[str, str]] = {}
    for definition in definitions:
        mappings.setdefault(definition.category, {})[_decode_key(definition)] = definition.glyph
    for mapping in mappings.values():
        for key in exclude:
            mapping.pop(key, None)
    return _freeze(mappings)


def _build_encode(
    definitions: list[MacroDefinition], exclude: frozenset[str]
) -> Mapping[Category, CategoryTable]:
    mappings: dict[Category, dict[str, str]] = {}
    raw: dict[Category, set[str]] = {}
    for definition in definitions:
        mappings.setdefault(definition.category, {})[definition.glyph] = definition.macro
    # Preferred definitions are applied last so they win duplicate glyphs.
    for definition in definitions:
        if definition.preferred:
            mappings[definition.category][definition.glyph] = definition.macro
    for definition in definitions:
        if definition.raw and mappings[definition.category][definition.glyph] == definition.macro:
            raw.setdefault(definition.category, set()).add(definition.glyph)
    for mapping in mappings.values():
        for key in exclude:
            mapping.pop(key, None)
    return _freeze(mappings, raw)


def build_table(
    data: MacroDataSet,
    direction: Direction,
    set_name: str,
    *,
    emitter: DiagnosticEmitter | None = None,
    issues: list[DataError] | None = None,
) -> RecodeTable:
    """Build the table for one direction.

    Raises :class:`ConfigurationError` when there are no definitions at all or
    when ``set_name`` selects none of them. The ``null`` set always yields an
    identity table.
    """
    emitter = emitter or LoggingEmitter()
    issues = issues if issues is not None else []
    set_name = set_name.strip().lower()

    if set_name == NULL_SET:
        return RecodeTable.identity(direction, NULL_SET)
    if not data.definitions:
        raise ConfigurationError("No macro definitions available to build recode tables.")

    definitions = _accepted_definitions(data, set_name, emitter, issues)
    if not definitions:
        raise ConfigurationError(
            f"Recode set '{set_name}' does not match any {direction} macro definition."
        )

    if direction == "decode":
        categories = _build_decode(definitions, data.decode_exclude)
    else:
        categories = _build_encode(definitions, data.encode_exclude)

    table = RecodeTable(direction=direction, set_name=set_name, categories=categories)
    emitter.event(
        "recode_tables_built",
        {"direction": direction, "set": set_name, "counts": table.counts()},
    )
    return table


def build_tables(
    data: MacroDataSet,
    decode_set: str,
    encode_set: str,
    *,
    emitter: DiagnosticEmitter | None = None,
) -> RecodeTables:
    """Build both directions, degrading an unusable set to an identity table."""
    emitter = emitter or LoggingEmitter()
    issues: list[DataError] = []
    built: dict[str, RecodeTable] = {}
    for direction, set_name in (("decode", decode_set), ("encode", encode_set)):
        try:
            built[direction] = build_table(
                data, direction, set_name, emitter=emitter, issues=issues
            )
        except ConfigurationError as exc:
            emitter.warning(str(exc), exc)
            emitter.event("recode_set_empty", {"direction": direction, "set": set_name})
            built[direction] = RecodeTable.identity(direction, set_name.strip().lower())

    return RecodeTables(decode=built["decode"], encode=built["encode"], issues=tuple(issues))


__all__ = [
    "CategoryTable",
    "Direction",
    "RecodeTable",
    "RecodeTables",
    "build_table",
    "build_tables",
    "compile_alternation",
    "validate_definition",
]
