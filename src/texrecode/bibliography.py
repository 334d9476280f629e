"""Recode the fields of BibTeX entries through pybtex."""

from __future__ import annotations

from dataclasses import dataclass
import io
import logging
from pathlib import Path
from typing import Literal
import unicodedata

from pybtex.database import BibliographyData, Person
from pybtex.database.input import bibtex
from pybtex.exceptions import PybtexError

from texrecode.core.recoder import Recoder
from texrecode.core.verbatim import VerbatimFields


logger = logging.getLogger(__name__)

RecodeDirection = Literal["decode", "encode"]


@dataclass(frozen=True, slots=True)
class RecodedField:
    """One field or person list whose value changed while recoding."""

    key: str
    field: str
    before: str
    after: str


def _is_existing_file(source: str) -> bool:
    if "\n" in source:
        return False
    try:
        return Path(source).is_file()
    except (OSError, ValueError):
        # BibTeX text too long or odd to be a file name
        return False


def parse_bibliography(source: Path | str) -> BibliographyData:
    """Parse a BibTeX file, or BibTeX text when ``source`` is not a file."""
    parser = bibtex.Parser()
    if isinstance(source, Path) or _is_existing_file(source):
        path = Path(source)
        try:
            return parser.parse_file(str(path))
        except (OSError, PybtexError) as exc:
            raise PybtexError(f"Failed to parse '{path}': {exc}") from exc
    try:
        return parser.parse_stream(io.StringIO(source))
    except PybtexError as exc:
        raise PybtexError(f"Failed to parse bibliography payload: {exc}") from exc


def recode_bibliography(
    data: BibliographyData,
    recoder: Recoder,
    *,
    direction: RecodeDirection = "decode",
    verbatim: VerbatimFields | None = None,
) -> list[RecodedField]:
    """Recode every field and person name of ``data`` in place.

    Fields named in ``verbatim`` (the recoder's own list, else the biblatex
    defaults) are left alone in both directions. Encoding works on NFD text.
    """
    protected = verbatim or recoder.verbatim or VerbatimFields.biblatex()

    if direction == "decode":

        def transform(value: str) -> str:
            return recoder.decode(value)

    elif direction == "encode":

        def transform(value: str) -> str:
            return recoder.encode(unicodedata.normalize("NFD", value))

    else:
        raise ValueError(f"Unknown recode direction '{direction}'.")

    changes: list[RecodedField] = []
    for key, entry in data.entries.items():
        for name, value in list(entry.fields.items()):
            if name in protected:
                continue
            recoded = transform(value)
            if recoded != value:
                entry.fields[name] = recoded
                changes.append(RecodedField(key=key, field=name, before=value, after=recoded))

        for role, persons in list(entry.persons.items()):
            if role in protected:
                continue
            updated: list[Person] = []
            for person in persons:
                before = str(person)
                after = transform(before)
                if after == before:
                    updated.append(person)
                    continue
                updated.append(Person(after))
                changes.append(RecodedField(key=key, field=role, before=before, after=after))
            entry.persons[role] = updated

    logger.debug("Recoded %d bibliography values (%s).", len(changes), direction)
    return changes


def write_bibliography(data: BibliographyData, target: Path | str) -> Path:
    """Persist ``data`` as BibTeX and return the written path."""
    path = Path(target)
    payload = data.to_string("bibtex").rstrip() + "\n"
    path.write_text(payload, encoding="utf-8")
    return path


__all__ = [
    "RecodeDirection",
    "RecodedField",
    "parse_bibliography",
    "recode_bibliography",
    "write_bibliography",
]
