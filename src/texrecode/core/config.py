"""Configuration model for the recoder.

RecodeSettings

`decode_set` (`str`)
: Recode set used when turning LaTeX into Unicode. ``null`` disables decoding.

`encode_set` (`str`)
: Recode set used when turning Unicode into LaTeX. ``null`` disables encoding.
  Independent from `decode_set`, so decoding may be richer than encoding.

`recode_data` (`Path | None`)
: User-defined ``<texmap>`` data file. Bare names are looked up with
  ``kpsewhich``. Defaults to the data bundled with the package.

`normalize` (`bool`)
: Apply Unicode normalization to decoded text.

`normalization` (`str`)
: Normalization form applied when `normalize` is enabled (``NFD`` default).

`verbatim_fields` / `verbatim_lists` (`list[str] | None`)
: Field and list names whose values are never rewritten by the decoder.

`use_datamodel` (`bool`)
: Fall back to the biblatex verbatim fields when no explicit names are given.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
import yaml

from .exceptions import ConfigurationError
from .verbatim import VerbatimFields


class RecodeSettings(BaseModel):
    """Options selecting the recode sets and decode behaviour."""

    model_config = ConfigDict(extra="forbid")

    decode_set: str = "base"
    encode_set: str = "base"
    recode_data: Path | None = None
    normalize: bool = True
    normalization: Literal["NFC", "NFD", "NFKC", "NFKD"] = "NFD"
    verbatim_fields: list[str] | None = None
    verbatim_lists: list[str] | None = None
    use_datamodel: bool = False

    @field_validator("decode_set", "encode_set", mode="before")
    @classmethod
    def _normalise_set(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        lowered = value.strip().lower()
        if not lowered:
            raise ValueError("Recode set identifiers must not be empty.")
        return lowered

    @field_validator("normalization", mode="before")
    @classmethod
    def _normalise_form(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    def verbatim(self) -> VerbatimFields | None:
        """Return the protected field names, or ``None`` when guarding is off."""
        if self.verbatim_fields is None and self.verbatim_lists is None:
            return VerbatimFields.biblatex() if self.use_datamodel else None
        return VerbatimFields.from_names(self.verbatim_fields or (), self.verbatim_lists or ())


def settings_from_mapping(
    payload: Mapping[str, Any], *, base_dir: Path | None = None
) -> RecodeSettings:
    """Build settings from a mapping, optionally nested under ``recode``."""
    data = dict(payload)
    nested = data.get("recode")
    if isinstance(nested, Mapping):
        data = dict(nested)

    try:
        settings = RecodeSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid recode settings: {exc}") from exc

    # Relative data files live next to the settings file; anything else is
    # left for kpsewhich to find.
    if base_dir is not None and settings.recode_data is not None:
        candidate = settings.recode_data.expanduser()
        if not candidate.is_absolute() and (base_dir / candidate).is_file():
            settings = settings.model_copy(update={"recode_data": base_dir / candidate})
    return settings


def load_settings(path: Path | str) -> RecodeSettings:
    """Read :class:`RecodeSettings` from a YAML file."""
    path = Path(path)
    try:
        payload = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read settings file '{path}': {exc}") from exc

    try:
        parsed = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in settings file '{path}': {exc}") from exc

    if parsed is None:
        return RecodeSettings()
    if not isinstance(parsed, Mapping):
        raise ConfigurationError(f"Settings file '{path}' must contain a mapping.")
    return settings_from_mapping(parsed, base_dir=path.parent)


__all__ = ["RecodeSettings", "load_settings", "settings_from_mapping"]
