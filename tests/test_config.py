from __future__ import annotations

from pathlib import Path

import pytest

from texrecode.core.config import RecodeSettings, load_settings, settings_from_mapping
from texrecode.core.exceptions import ConfigurationError
from texrecode.core.verbatim import VerbatimFields


def test_defaults() -> None:
    settings = RecodeSettings()
    assert settings.decode_set == "base"
    assert settings.encode_set == "base"
    assert settings.recode_data is None
    assert settings.normalize is True
    assert settings.normalization == "NFD"
    assert settings.verbatim() is None


def test_set_names_and_forms_are_normalised() -> None:
    settings = RecodeSettings(decode_set=" Full ", encode_set="NULL", normalization="nfc")
    assert settings.decode_set == "full"
    assert settings.encode_set == "null"
    assert settings.normalization == "NFC"


@pytest.mark.parametrize(
    "payload",
    [
        {"decode_set": "  "},
        {"normalization": "NFX"},
        {"unknown_option": True},
    ],
)
def test_invalid_settings_are_rejected(payload: dict[str, object]) -> None:
    with pytest.raises(ConfigurationError, match="Invalid recode settings"):
        settings_from_mapping(payload)


def test_verbatim_names() -> None:
    explicit = RecodeSettings(verbatim_fields=["url", "DOI"], use_datamodel=True)
    assert explicit.verbatim() == VerbatimFields(fields=("url", "doi"))

    datamodel = RecodeSettings(use_datamodel=True)
    assert datamodel.verbatim() == VerbatimFields.biblatex()


def test_settings_may_be_nested_under_recode() -> None:
    settings = settings_from_mapping({"recode": {"decode_set": "full"}, "other": 1})
    assert settings.decode_set == "full"


def test_load_settings_from_yaml(tmp_path: Path) -> None:
    data_file = tmp_path / "custom.xml"
    data_file.write_text("<texmap/>", encoding="utf-8")
    config = tmp_path / "texrecode.yml"
    config.write_text(
        "recode:\n"
        "  decode_set: full\n"
        "  encode_set: base\n"
        "  recode_data: custom.xml\n"
        "  verbatim_fields: [url]\n",
        encoding="utf-8",
    )

    settings = load_settings(config)

    assert settings.decode_set == "full"
    assert settings.recode_data == tmp_path / "custom.xml"
    assert settings.verbatim() == VerbatimFields(fields=("url",))


def test_unresolved_recode_data_is_kept_for_kpsewhich(tmp_path: Path) -> None:
    config = tmp_path / "texrecode.yml"
    config.write_text("recode_data: recode-data.xml\n", encoding="utf-8")
    assert load_settings(config).recode_data == Path("recode-data.xml")


def test_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    config = tmp_path / "empty.yml"
    config.write_text("", encoding="utf-8")
    assert load_settings(config) == RecodeSettings()


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("- just\n- a list\n", "must contain a mapping"),
        ("decode_set: [unclosed\n", "Invalid YAML"),
    ],
)
def test_load_settings_errors(tmp_path: Path, content: str, message: str) -> None:
    config = tmp_path / "broken.yml"
    config.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError, match=message):
        load_settings(config)


def test_missing_settings_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Failed to read"):
        load_settings(tmp_path / "missing.yml")
