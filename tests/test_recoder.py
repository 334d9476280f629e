from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from texrecode.core.config import RecodeSettings
from texrecode.core.diagnostics import NullEmitter
from texrecode.core.exceptions import TablesNotInitialisedError
from texrecode.core.models import Category, MacroDataSet
from texrecode.core.recoder import (
    Recoder,
    get_recoder,
    init_sets,
    latex_decode,
    latex_encode,
    load_recoder,
    recoder_context,
    set_recoder,
)
from texrecode.core.verbatim import VerbatimFields


if TYPE_CHECKING:
    from conftest import RecordingEmitter


KHWARIZMI_LATEX = "Mu\\d{h}ammad ibn M\\={u}s\\={a} al-Khw\\={a}rizm\\={\\i}"
KHWARIZMI_TEXT = "Muh\u0323ammad ibn Mu\u0304sa\u0304 al-Khwa\u0304rizmi\u0304"
E_ACUTE = "e\u0301"


def test_recoding_before_init_sets_fails() -> None:
    recoder = Recoder(emitter=NullEmitter())
    assert not recoder.initialised
    with pytest.raises(TablesNotInitialisedError, match="init_sets"):
        recoder.decode("\\'e")
    with pytest.raises(TablesNotInitialisedError):
        recoder.encode(E_ACUTE)
    with pytest.raises(TablesNotInitialisedError):
        _ = recoder.tables


def test_module_functions_require_init_sets() -> None:
    with pytest.raises(TablesNotInitialisedError):
        latex_decode("\\'e")


def test_decode_and_encode_transliterated_name(base_recoder: Recoder) -> None:
    decoded = base_recoder.decode(KHWARIZMI_LATEX)
    assert decoded == KHWARIZMI_TEXT
    assert base_recoder.encode(decoded) == KHWARIZMI_LATEX


def test_null_sets_are_identity() -> None:
    recoder = Recoder(emitter=NullEmitter())
    recoder.init_sets("null", "null")
    assert recoder.decode("\\'e") == "\\'e"
    assert recoder.encode(E_ACUTE) == E_ACUTE


def test_plain_text_is_returned_unchanged(base_recoder: Recoder) -> None:
    text = "Nothing to see here."
    assert base_recoder.decode(text) is text


@pytest.mark.parametrize(
    "text",
    [
        "\u03b1\u03b2",
        "\u00df and \u00e6",
        "x\u00b2",
        "\u261b\u2713",
        "a\u2013b",
        "\u2208\u0338",
        "\u00a7 12",
    ],
)
def test_mixed_text_round_trip(full_recoder: Recoder, text: str) -> None:
    encoded = full_recoder.encode(text)
    assert encoded != text
    assert full_recoder.decode(encoded) == text


def test_every_plain_definition_round_trips(
    full_recoder: Recoder, macro_data: MacroDataSet
) -> None:
    failures = []
    for definition in macro_data.definitions:
        if definition.category is Category.DIACRITICS or definition.raw:
            continue
        if "full" not in definition.sets:
            continue
        encoded = full_recoder.encode(definition.glyph)
        if full_recoder.decode(encoded) != definition.glyph:
            failures.append((definition.macro, definition.glyph, encoded))
    assert failures == []


def test_verbatim_fields_are_preserved() -> None:
    recoder = Recoder(verbatim=VerbatimFields.biblatex(), emitter=NullEmitter())
    recoder.init_sets()
    text = "url = {http://example.com/\\%20\\\"a}, title = {\\\"a}"
    assert recoder.decode(text) == "url = {http://example.com/\\%20\\\"a}, title = a\u0308"


def test_longest_macro_wins_with_custom_data(sample_data: MacroDataSet) -> None:
    recoder = Recoder(sample_data, emitter=NullEmitter())
    recoder.init_sets("base", "base")
    assert recoder.decode("\\sscript{}\\ss{}") == "ſß"
    assert recoder.encode("ſß") == "\\sscript{}\\ss{}"


def test_init_sets_replaces_tables(base_recoder: Recoder) -> None:
    assert base_recoder.decode("{$\\alpha$}") == "{$\\alpha$}"
    first = base_recoder.tables

    base_recoder.init_sets("full", "full")

    assert base_recoder.tables is not first
    assert base_recoder.decode("{$\\alpha$}") == "α"


def test_directions_use_independent_sets() -> None:
    recoder = Recoder(emitter=NullEmitter())
    tables = recoder.init_sets("full", "null")
    assert tables.encode.is_identity
    assert recoder.decode("\\alpha") == "α"
    assert recoder.encode("α") == "α"


def test_unknown_set_logs_a_warning(caplog: pytest.LogCaptureFixture) -> None:
    recoder = Recoder()
    with caplog.at_level(logging.WARNING, logger="texrecode"):
        tables = recoder.init_sets("klingon", "base")
    assert tables.decode.is_identity
    assert any("klingon" in record.message for record in caplog.records)
    assert recoder.decode("\\'e") == "\\'e"
    assert recoder.encode(E_ACUTE) == "\\'{e}"


def test_init_sets_emits_events(recording_emitter: RecordingEmitter) -> None:
    recoder = Recoder(emitter=recording_emitter)
    recoder.init_sets("base", "full")
    built = [
        payload["set"]
        for name, payload in recording_emitter.events
        if name == "recode_tables_built"
    ]
    assert built == ["base", "full"]


def test_module_level_recoder() -> None:
    init_sets("base", "base")
    assert latex_decode("\\'e") == E_ACUTE
    assert latex_decode("\\'e", normalization="NFC") == "é"
    assert latex_encode(E_ACUTE) == "\\'{e}"
    assert get_recoder() is get_recoder()


def test_recoder_context_restores_previous(full_recoder: Recoder) -> None:
    previous = set_recoder(Recoder(emitter=NullEmitter()))
    with recoder_context(full_recoder) as active:
        assert active is full_recoder
        assert latex_decode("\\alpha") == "α"
    assert get_recoder() is previous


def test_from_settings_reports_loaded_data(recording_emitter: RecordingEmitter) -> None:
    settings = RecodeSettings(decode_set="full", encode_set="base", use_datamodel=True)
    recoder = Recoder.from_settings(settings, emitter=recording_emitter)

    assert recording_emitter.events[0][0] == "recode_data_loaded"
    assert recording_emitter.events[0][1]["count"] == len(recoder.data)
    assert recoder.verbatim == VerbatimFields.biblatex()
    assert recoder.tables.decode.set_name == "full"
    assert recoder.tables.encode.set_name == "base"


def test_load_recoder_with_custom_data(tmp_path: Path) -> None:
    path = tmp_path / "recode.xml"
    path.write_text(
        '<texmap><maps type="letters" set="base">'
        "<map><from>ss</from><to>ß</to></map></maps></texmap>",
        encoding="utf-8",
    )
    recoder = load_recoder(recode_data=path, emitter=NullEmitter())
    assert len(recoder.data) == 1
    assert recoder.decode("\\ss{}") == "ß"
    assert recoder.decode("\\'e") == "\\'e"


def test_concurrent_decode_and_reinit(full_recoder: Recoder) -> None:
    def _decode(_: int) -> str:
        return full_recoder.decode("\\'e \\ss{}")

    with ThreadPoolExecutor(max_workers=4) as pool:
        futures = [pool.submit(_decode, index) for index in range(50)]
        full_recoder.init_sets("base", "base")
        results = {future.result() for future in futures}

    assert results == {"é ß"}
