"""Shield verbatim field values from macro rewriting during decode.

Values of protected fields (``url = {...}``, ``doi = "..."``) are swapped for
the MD5 digest of their content before any rewriting happens and swapped back
once decoding is done. The digest store belongs to one :class:`VerbatimGuard`,
and a guard is created for every decode call, so concurrent calls never share
state.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
import hashlib
import re
import unicodedata


BIBLATEX_VERBATIM_FIELDS: tuple[str, ...] = (
    "doi",
    "eprint",
    "file",
    "pdf",
    "url",
    "urlraw",
    "verba",
    "verbb",
    "verbc",
)
BIBLATEX_VERBATIM_LISTS: tuple[str, ...] = ("urls",)

_DIGEST = re.compile(r"[0-9a-f]{32}")


@dataclass(frozen=True)
class VerbatimFields:
    """Names of the fields and lists whose values must never be rewritten."""

    fields: tuple[str, ...] = ()
    lists: tuple[str, ...] = ()
    _patterns: dict[str, re.Pattern[str] | None] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    @classmethod
    def from_names(
        cls, fields: Iterable[str] = (), lists: Iterable[str] = ()
    ) -> VerbatimFields:
        return cls(
            fields=tuple(name.strip().lower() for name in fields if name.strip()),
            lists=tuple(name.strip().lower() for name in lists if name.strip()),
        )

    @classmethod
    def biblatex(cls) -> VerbatimFields:
        """Return the verbatim fields of the default biblatex data model."""
        return cls(fields=BIBLATEX_VERBATIM_FIELDS, lists=BIBLATEX_VERBATIM_LISTS)

    @property
    def names(self) -> tuple[str, ...]:
        return self.fields + self.lists

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self.names

    def _alternation(self) -> str | None:
        names = sorted(set(self.names), key=lambda name: (-len(name), name))
        if not names:
            return None
        return "|".join(re.escape(name) for name in names)

    def _compiled(self, kind: str, template: str) -> re.Pattern[str] | None:
        if kind not in self._patterns:
            alternation = self._alternation()
            self._patterns[kind] = (
                re.compile(template.format(names=alternation), re.IGNORECASE)
                if alternation
                else None
            )
        return self._patterns[kind]

    @property
    def marker_pattern(self) -> re.Pattern[str] | None:
        """Pattern finding any protected name, used by the decode fast path."""
        return self._compiled("marker", r"(?:{names})")

    @property
    def quoted_pattern(self) -> re.Pattern[str] | None:
        return self._compiled("quoted", r'(\b(?:{names})\s*=\s*)(")([^"]+)(")')

    @property
    def braced_pattern(self) -> re.Pattern[str] | None:
        return self._compiled("braced", r"(\b(?:{names})\s*=\s*)(\{{)([^}}]+)(\}})")


def verbatim_digest(value: str) -> str:
    """Return the content digest standing in for a verbatim value."""
    return hashlib.md5(unicodedata.normalize("NFC", value).encode("utf-8")).hexdigest()


class VerbatimGuard:
    """Call-scoped store of protected values keyed by digest."""

    def __init__(self, verbatim: VerbatimFields | None = None) -> None:
        self._verbatim = verbatim
        self._saved: dict[str, str] = {}

    @property
    def active(self) -> bool:
        return self._verbatim is not None and bool(self._verbatim.names)

    def __len__(self) -> int:
        return len(self._saved)

    def _mark(self, match: re.Match[str]) -> str:
        prefix, opening, value, closing = match.groups()
        digest = verbatim_digest(value)
        self._saved[digest] = value
        return f"{prefix}{opening}{digest}{closing}"

    def protect(self, text: str) -> str:
        """Replace protected values in ``text`` with their digests."""
        if not self.active:
            return text
        assert self._verbatim is not None
        for pattern in (self._verbatim.quoted_pattern, self._verbatim.braced_pattern):
            if pattern is not None:
                text = pattern.sub(self._mark, text)
        return text

    def restore(self, text: str) -> str:
        """Put every recorded value back in place of its digest."""
        if not self._saved:
            return text
        return _DIGEST.sub(lambda match: self._saved.get(match.group(0), match.group(0)), text)


__all__ = [
    "BIBLATEX_VERBATIM_FIELDS",
    "BIBLATEX_VERBATIM_LISTS",
    "VerbatimFields",
    "VerbatimGuard",
    "verbatim_digest",
]
