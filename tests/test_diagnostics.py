from __future__ import annotations

from collections.abc import Iterator
import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from texrecode.cli.diagnostics import CliEmitter
from texrecode.cli.state import CLIState, get_cli_state, install_cli_state
from texrecode.core.diagnostics import (
    DiagnosticEmitter,
    LoggingEmitter,
    NullEmitter,
    format_event_message,
)
from texrecode.core.exceptions import (
    ConfigurationError,
    DataError,
    RecodeError,
    exception_hint,
    exception_messages,
)


@pytest.fixture(autouse=True)
def _fresh_cli_state() -> Iterator[None]:
    yield
    install_cli_state()


def test_emitters_follow_the_protocol() -> None:
    assert isinstance(NullEmitter(), DiagnosticEmitter)
    assert isinstance(LoggingEmitter(), DiagnosticEmitter)
    assert isinstance(CliEmitter(CLIState()), DiagnosticEmitter)


def test_logging_emitter_forwards_to_logger(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter(logger_obj=logging.getLogger("texrecode.test"))
    with caplog.at_level(logging.DEBUG, logger="texrecode.test"):
        emitter.warning("careful")
        emitter.error("broken", ValueError("boom"))
        emitter.event("recode_data_loaded", {"source": None, "count": 3})
        emitter.event("custom", {"value": 1})

    messages = [(record.levelno, record.getMessage()) for record in caplog.records]
    assert (logging.WARNING, "careful") in messages
    assert (logging.ERROR, "broken") in messages
    assert (logging.INFO, "Loaded 3 macro definitions from <bundled>") in messages
    assert any("custom" in message for _, message in messages)


def test_format_event_message() -> None:
    built = format_event_message(
        "recode_tables_built",
        {"direction": "decode", "set": "base", "counts": {"letters": 2, "greek": 0, "symbols": 1}},
    )
    assert built == "Built decode table for set 'base': 3 entries (letters, symbols)"

    empty = format_event_message("recode_set_empty", {"direction": "encode", "set": "x"})
    assert empty == "No encode mappings for set 'x'; using identity recoding"

    assert format_event_message("unrelated", {}) is None


def test_cli_emitter_reports_events_only_when_verbose(
    capsys: pytest.CaptureFixture[str],
) -> None:
    payload = {"direction": "decode", "set": "klingon"}

    CliEmitter(CLIState()).event("recode_set_empty", payload)
    assert capsys.readouterr().err == ""

    CliEmitter(CLIState(verbosity=1)).event("recode_set_empty", payload)
    CliEmitter(CLIState(verbosity=1)).event("unrelated", {})
    captured = capsys.readouterr()
    assert "No decode mappings for set 'klingon'" in captured.err
    assert "unrelated" not in captured.err
    assert captured.out == ""


def test_cli_emitter_details_follow_verbosity(capsys: pytest.CaptureFixture[str]) -> None:
    error = DataError("Rejected definition", macro="ss", category="letters")

    CliEmitter(CLIState()).error("Rejected definition", error)
    assert "macro 'ss'" not in capsys.readouterr().err

    CliEmitter(CLIState(verbosity=2)).error("Rejected definition", error)
    assert "macro 'ss' in letters" in capsys.readouterr().err


def test_installed_state_is_found_through_the_context_chain() -> None:
    root = SimpleNamespace(obj=None, parent=None)
    child = SimpleNamespace(obj=None, parent=root)

    state = install_cli_state(root, verbosity=2, recode_data=Path("custom.xml"))

    assert root.obj is state
    assert get_cli_state(child) is state
    assert get_cli_state() is state


def test_installing_state_drops_previous_options() -> None:
    first = install_cli_state(verbosity=1, debug=True, recode_data=Path("custom.xml"))
    second = install_cli_state()

    assert second is not first
    assert get_cli_state() is second
    assert second.recode_data is None
    assert second.verbosity == 0
    assert not second.show_tracebacks


def test_cli_emitter_warning_goes_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    emitter = CliEmitter(CLIState())
    emitter.warning("Unknown recode set 'klingon'")

    captured = capsys.readouterr()
    assert "warning:" in captured.err
    assert "klingon" in captured.err
    assert captured.out == ""


def test_data_error_carries_context() -> None:
    error = DataError("bad macro", macro="ss", category="letters")
    assert isinstance(error, RecodeError)
    assert isinstance(error, ValueError)
    assert error.macro == "ss"
    assert error.category == "letters"


def test_exception_chain_helpers() -> None:
    try:
        try:
            raise OSError("disk unplugged")
        except OSError as exc:
            raise ConfigurationError("Can't read recode data file") from exc
    except ConfigurationError as exc:
        assert exception_messages(exc) == ["Can't read recode data file", "disk unplugged"]
        assert exception_hint(exc) == "disk unplugged"

    assert exception_hint(RecodeError()) is None
