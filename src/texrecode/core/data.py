"""Locate and parse the macro definition data file.

The data file is a ``<texmap>`` document::

    <texmap>
      <maps type="letters" set="base, full">
        <map><from>ss</from><to>ß</to></map>
        <map><from preferred="1">d</from><to>&#x0323;</to></map>
      </maps>
      <decode_exclude><char>textbackslash</char></decode_exclude>
      <encode_exclude><char>\\</char></encode_exclude>
    </texmap>

Macro and glyph text are canonically decomposed when loaded so that lookups
match decoded (NFD) text. Entries with an unknown category or missing text are
kept as-is here and rejected by the table builder, which reports them.
"""

from __future__ import annotations

from importlib import resources
import logging
from pathlib import Path
import shutil
import subprocess
import unicodedata
import xml.etree.ElementTree as ElementTree

from .exceptions import ConfigurationError
from .models import Category, MacroDataSet, MacroDefinition


logger = logging.getLogger(__name__)

_DATA_PACKAGE = "texrecode.data"
BUNDLED_DATA_NAME = "recode_data.xml"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUE_VALUES


def _text(node: ElementTree.Element | None) -> str:
    if node is None:
        return ""
    return unicodedata.normalize("NFD", "".join(node.itertext()))


def _split_sets(value: str | None) -> frozenset[str]:
    if not value:
        return frozenset()
    return frozenset(part.strip().lower() for part in value.split(",") if part.strip())


def locate_recode_data(name: str | Path) -> Path:
    """Resolve a user supplied recode data file.

    Existing paths are returned directly. Bare names are looked up in the TeX
    tree with ``kpsewhich`` when it is available.
    """
    candidate = Path(name).expanduser()
    if candidate.is_file():
        return candidate.resolve()

    kpsewhich = shutil.which("kpsewhich")
    if kpsewhich is None:
        raise ConfigurationError(
            f"Recode data file '{name}' not found and kpsewhich is not available."
        )

    try:
        process = subprocess.run(
            [kpsewhich, str(name)],
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise ConfigurationError(f"Error running kpsewhich to look for '{name}': {exc}") from exc

    # kpsewhich under cygwin may leave a trailing carriage return
    located = process.stdout.strip().rstrip("\r")
    if process.returncode != 0 or not located:
        raise ConfigurationError(f"kpsewhich could not locate recode data file '{name}'.")
    return Path(located)


def parse_macro_data(payload: str | bytes, *, source: Path | None = None) -> MacroDataSet:
    """Parse a ``<texmap>`` payload into a :class:`MacroDataSet`."""
    try:
        root = ElementTree.fromstring(payload)
    except ElementTree.ParseError as exc:
        origin = source or "<string>"
        raise ConfigurationError(f"Failed to parse recode data from {origin}: {exc}") from exc

    if root.tag != "texmap":
        raise ConfigurationError(f"Expected a <texmap> document, found <{root.tag}>.")

    definitions: list[MacroDefinition] = []
    for maps in root.iterfind("maps"):
        type_name = maps.get("type", "")
        try:
            category = Category.parse(type_name)
        except ValueError:
            logger.warning("Skipping <maps> block with unknown type '%s'.", type_name)
            continue
        sets = _split_sets(maps.get("set"))
        for node in maps.iterfind("map"):
            source_node = node.find("from")
            attributes = source_node.attrib if source_node is not None else {}
            definitions.append(
                MacroDefinition(
                    category=category,
                    macro=_text(source_node),
                    glyph=_text(node.find("to")),
                    preferred=_flag(attributes.get("preferred")),
                    raw=_flag(attributes.get("raw")),
                    sets=sets,
                )
            )

    decode_exclude = [_text(node) for node in root.iterfind("decode_exclude/char")]
    encode_exclude = [_text(node) for node in root.iterfind("encode_exclude/char")]

    return MacroDataSet.from_definitions(
        definitions,
        decode_exclude=(item for item in decode_exclude if item),
        encode_exclude=(item for item in encode_exclude if item),
        source=source,
    )


def load_macro_data(path: str | Path | None = None) -> MacroDataSet:
    """Load macro definitions from ``path`` or from the bundled data file."""
    if path is None:
        return bundled_macro_data()

    resolved = locate_recode_data(path)
    logger.info("Using user-defined recode data file '%s'", resolved)
    try:
        payload = resolved.read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Can't read recode data file '{resolved}': {exc}") from exc
    return parse_macro_data(payload, source=resolved)


def _resource_bytes(name: str) -> bytes:
    resource = resources.files(_DATA_PACKAGE) / name
    with resources.as_file(resource) as path:
        return path.read_bytes()


_BUNDLED: MacroDataSet | None = None


def bundled_macro_data() -> MacroDataSet:
    """Return the macro definitions shipped with the package (cached)."""
    global _BUNDLED
    if _BUNDLED is None:
        _BUNDLED = parse_macro_data(_resource_bytes(BUNDLED_DATA_NAME))
    return _BUNDLED


__all__ = [
    "BUNDLED_DATA_NAME",
    "bundled_macro_data",
    "load_macro_data",
    "locate_recode_data",
    "parse_macro_data",
]
