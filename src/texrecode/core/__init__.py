"""Recoding engine: macro data, tables, decoder, encoder and recoder."""

from __future__ import annotations

from .config import RecodeSettings, load_settings, settings_from_mapping
from .data import bundled_macro_data, load_macro_data, locate_recode_data, parse_macro_data
from .decoder import LatexDecoder, decode_text
from .diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter, format_event_message
from .encoder import LatexEncoder, encode_text
from .exceptions import (
    ConfigurationError,
    DataError,
    RecodeError,
    TablesNotInitialisedError,
)
from .models import DECODE_ORDER, ENCODE_ORDER, NULL_SET, Category, MacroDataSet, MacroDefinition
from .recoder import (
    Recoder,
    get_recoder,
    init_sets,
    latex_decode,
    latex_encode,
    load_recoder,
    recoder_context,
    set_recoder,
)
from .tables import CategoryTable, RecodeTable, RecodeTables, build_table, build_tables
from .verbatim import VerbatimFields, VerbatimGuard


__all__ = [
    "DECODE_ORDER",
    "ENCODE_ORDER",
    "NULL_SET",
    "Category",
    "CategoryTable",
    "ConfigurationError",
    "DataError",
    "DiagnosticEmitter",
    "LatexDecoder",
    "LatexEncoder",
    "LoggingEmitter",
    "MacroDataSet",
    "MacroDefinition",
    "NullEmitter",
    "RecodeError",
    "RecodeSettings",
    "RecodeTable",
    "RecodeTables",
    "Recoder",
    "TablesNotInitialisedError",
    "VerbatimFields",
    "VerbatimGuard",
    "build_table",
    "build_tables",
    "bundled_macro_data",
    "decode_text",
    "encode_text",
    "format_event_message",
    "get_recoder",
    "init_sets",
    "latex_decode",
    "latex_encode",
    "load_macro_data",
    "load_recoder",
    "load_settings",
    "locate_recode_data",
    "parse_macro_data",
    "recoder_context",
    "set_recoder",
    "settings_from_mapping",
]
