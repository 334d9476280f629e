"""Bidirectional LaTeX ⇄ Unicode recoding."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from texrecode.core import (
    Category,
    ConfigurationError,
    DataError,
    MacroDataSet,
    MacroDefinition,
    RecodeError,
    Recoder,
    RecodeSettings,
    TablesNotInitialisedError,
    VerbatimFields,
    get_recoder,
    init_sets,
    latex_decode,
    latex_encode,
    load_macro_data,
    load_recoder,
    load_settings,
    set_recoder,
)
from texrecode.version import get_version


try:
    __version__ = _pkg_version("texrecode")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    "Category",
    "ConfigurationError",
    "DataError",
    "MacroDataSet",
    "MacroDefinition",
    "RecodeError",
    "RecodeSettings",
    "Recoder",
    "TablesNotInitialisedError",
    "VerbatimFields",
    "__version__",
    "get_version",
    "get_recoder",
    "init_sets",
    "latex_decode",
    "latex_encode",
    "load_macro_data",
    "load_recoder",
    "load_settings",
    "set_recoder",
]
