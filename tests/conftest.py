from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

import pytest

from texrecode.core.data import bundled_macro_data
from texrecode.core.diagnostics import NullEmitter
from texrecode.core.models import Category, MacroDataSet, MacroDefinition
from texrecode.core.recoder import Recoder, set_recoder
from texrecode.core.tables import RecodeTables, build_tables


class RecordingEmitter:
    """Emitter collecting diagnostics for assertions."""

    def __init__(self) -> None:
        self.debug_enabled = False
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))


def make_definition(
    category: Category,
    macro: str,
    glyph: str,
    *,
    sets: tuple[str, ...] = ("base",),
    preferred: bool = False,
    raw: bool = False,
) -> MacroDefinition:
    return MacroDefinition(
        category=category,
        macro=macro,
        glyph=glyph,
        preferred=preferred,
        raw=raw,
        sets=frozenset(sets),
    )


@pytest.fixture(autouse=True)
def _reset_default_recoder() -> Iterator[None]:
    set_recoder(None)
    yield
    set_recoder(None)


@pytest.fixture
def recording_emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def macro_data() -> MacroDataSet:
    return bundled_macro_data()


@pytest.fixture
def sample_data() -> MacroDataSet:
    return MacroDataSet.from_definitions(
        [
            make_definition(Category.LETTERS, "ss", "ß"),
            make_definition(Category.LETTERS, "sscript", "ſ"),
            make_definition(Category.DIACRITICS, "'", "\u0301"),
            make_definition(Category.DIACRITICS, "c", "\u0327"),
            make_definition(Category.SYMBOLS, "texttimes", "×", preferred=True),
            make_definition(Category.SYMBOLS, "times", "×"),
            make_definition(Category.SYMBOLS, "textbackslash", "\\"),
            make_definition(Category.PUNCTUATION, "-", "‐", raw=True),
            make_definition(Category.DINGS, "2a", "☛", sets=("full",)),
        ],
        decode_exclude=["textbackslash"],
        encode_exclude=["\\"],
    )


@pytest.fixture
def base_tables(macro_data: MacroDataSet) -> RecodeTables:
    return build_tables(macro_data, "base", "base", emitter=NullEmitter())


@pytest.fixture
def full_tables(macro_data: MacroDataSet) -> RecodeTables:
    return build_tables(macro_data, "full", "full", emitter=NullEmitter())


@pytest.fixture
def base_recoder() -> Recoder:
    recoder = Recoder(emitter=NullEmitter())
    recoder.init_sets("base", "base")
    return recoder


@pytest.fixture
def full_recoder() -> Recoder:
    recoder = Recoder(emitter=NullEmitter())
    recoder.init_sets("full", "full")
    return recoder
