"""CLI command implementations exposed via ``texrecode.cli``."""

from __future__ import annotations

from .bib import bib
from .recode import decode, encode
from .sets import sets


__all__ = ["bib", "decode", "encode", "sets"]
