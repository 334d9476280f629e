"""Configured decode/encode entry points.

A :class:`Recoder` owns one generation of recode tables at a time. Calling
:meth:`Recoder.init_sets` builds a fresh generation and swaps it in whole;
every decode or encode call reads the current generation once and works on
that snapshot, so a concurrent reconfiguration never mixes tables from two
generations inside one call.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from threading import Lock, RLock

from .config import RecodeSettings
from .data import bundled_macro_data, load_macro_data
from .decoder import LatexDecoder, NormalizationForm
from .diagnostics import DiagnosticEmitter, LoggingEmitter
from .encoder import LatexEncoder
from .exceptions import TablesNotInitialisedError
from .models import MacroDataSet
from .tables import RecodeTables, build_tables
from .verbatim import VerbatimFields


@dataclass(frozen=True, slots=True)
class _Generation:
    tables: RecodeTables
    decoder: LatexDecoder
    encoder: LatexEncoder


class Recoder:
    """Decode LaTeX to Unicode and encode Unicode to LaTeX."""

    def __init__(
        self,
        data: MacroDataSet | None = None,
        *,
        verbatim: VerbatimFields | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self._data = data
        self._verbatim = verbatim
        self.emitter: DiagnosticEmitter = emitter or LoggingEmitter()
        self._generation: _Generation | None = None
        self._lock = Lock()

    @classmethod
    def from_settings(
        cls,
        settings: RecodeSettings,
        *,
        emitter: DiagnosticEmitter | None = None,
    ) -> Recoder:
        """Load data and verbatim fields from ``settings`` and build both tables."""
        emitter = emitter or LoggingEmitter()
        data = load_macro_data(settings.recode_data)
        emitter.event(
            "recode_data_loaded",
            {"source": str(data.source) if data.source else None, "count": len(data)},
        )
        recoder = cls(data, verbatim=settings.verbatim(), emitter=emitter)
        recoder.init_sets(settings.decode_set, settings.encode_set)
        return recoder

    @property
    def data(self) -> MacroDataSet:
        if self._data is None:
            self._data = bundled_macro_data()
        return self._data

    @property
    def verbatim(self) -> VerbatimFields | None:
        return self._verbatim

    @property
    def initialised(self) -> bool:
        return self._generation is not None

    @property
    def tables(self) -> RecodeTables:
        return self._snapshot().tables

    def init_sets(self, decode_set: str = "base", encode_set: str = "base") -> RecodeTables:
        """Build tables for both directions and replace the current ones.

        An unusable set is reported and degrades to identity recoding for its
        direction; it never raises.
        """
        tables = build_tables(self.data, decode_set, encode_set, emitter=self.emitter)
        generation = _Generation(
            tables=tables,
            decoder=LatexDecoder(tables.decode, self._verbatim),
            encoder=LatexEncoder(tables.encode),
        )
        with self._lock:
            self._generation = generation
        return tables

    def _snapshot(self) -> _Generation:
        with self._lock:
            generation = self._generation
        if generation is None:
            raise TablesNotInitialisedError(
                "Recode tables are not initialised; call init_sets() first."
            )
        return generation

    def decode(
        self,
        text: str,
        *,
        normalize: bool = True,
        normalization: NormalizationForm | str = "NFD",
    ) -> str:
        """Convert LaTeX macros in ``text`` into Unicode."""
        return self._snapshot().decoder.decode(
            text, normalize=normalize, normalization=normalization
        )

    def encode(self, text: str) -> str:
        """Convert Unicode characters in ``text`` into LaTeX macros."""
        return self._snapshot().encoder.encode(text)


_DEFAULT_RECODER: Recoder | None = None
_LOCK: RLock = RLock()


def get_recoder() -> Recoder:
    """Return the process-wide recoder, created on first use."""
    global _DEFAULT_RECODER
    with _LOCK:
        if _DEFAULT_RECODER is None:
            _DEFAULT_RECODER = Recoder()
        return _DEFAULT_RECODER


def set_recoder(recoder: Recoder | None) -> Recoder | None:
    """Replace the process-wide recoder and return it."""
    global _DEFAULT_RECODER
    with _LOCK:
        _DEFAULT_RECODER = recoder
        return _DEFAULT_RECODER


@contextmanager
def recoder_context(recoder: Recoder) -> Iterator[Recoder]:
    """Temporarily install ``recoder`` as the process-wide recoder."""
    global _DEFAULT_RECODER
    with _LOCK:
        previous = _DEFAULT_RECODER
        _DEFAULT_RECODER = recoder
    try:
        yield recoder
    finally:
        with _LOCK:
            _DEFAULT_RECODER = previous


def init_sets(decode_set: str = "base", encode_set: str = "base") -> RecodeTables:
    """(Re)build the tables of the process-wide recoder."""
    return get_recoder().init_sets(decode_set, encode_set)


def latex_decode(
    text: str,
    *,
    normalize: bool = True,
    normalization: NormalizationForm | str = "NFD",
) -> str:
    """Decode ``text`` with the process-wide recoder."""
    return get_recoder().decode(text, normalize=normalize, normalization=normalization)


def latex_encode(text: str) -> str:
    """Encode ``text`` with the process-wide recoder."""
    return get_recoder().encode(text)


def load_recoder(
    *,
    settings: RecodeSettings | None = None,
    recode_data: Path | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> Recoder:
    """Build a ready-to-use recoder from optional settings and data overrides."""
    settings = settings or RecodeSettings()
    if recode_data is not None:
        settings = settings.model_copy(update={"recode_data": recode_data})
    return Recoder.from_settings(settings, emitter=emitter)


__all__ = [
    "Recoder",
    "get_recoder",
    "init_sets",
    "latex_decode",
    "latex_encode",
    "load_recoder",
    "recoder_context",
    "set_recoder",
]
