from __future__ import annotations

from texrecode.core.verbatim import (
    BIBLATEX_VERBATIM_FIELDS,
    VerbatimFields,
    VerbatimGuard,
    verbatim_digest,
)


def test_from_names_normalises_names() -> None:
    fields = VerbatimFields.from_names([" URL ", "Doi", ""], ["urls"])
    assert fields.fields == ("url", "doi")
    assert fields.names == ("url", "doi", "urls")
    assert "URL" in fields
    assert "title" not in fields


def test_biblatex_defaults() -> None:
    fields = VerbatimFields.biblatex()
    assert "url" in fields
    assert "urls" in fields
    assert set(BIBLATEX_VERBATIM_FIELDS) <= set(fields.names)


def test_digest_is_computed_on_composed_text() -> None:
    assert verbatim_digest("\u00e9") == verbatim_digest("e\u0301")
    assert len(verbatim_digest("value")) == 32


def test_guard_protects_braced_and_quoted_values() -> None:
    guard = VerbatimGuard(VerbatimFields.from_names(["url", "doi"]))
    text = 'url = {http://example.com/\\%20}, DOI = "10.1000/a\\_b", title = {\\"a}'

    protected = guard.protect(text)

    assert "http://example.com" not in protected
    assert "10.1000" not in protected
    assert "title = {\\\"a}" in protected
    digest = verbatim_digest("http://example.com/\\%20")
    assert f"url = {{{digest}}}" in protected
    assert len(guard) == 2
    assert guard.restore(protected) == text


def test_guard_without_fields_is_a_no_op() -> None:
    guard = VerbatimGuard(None)
    text = "url = {http://example.com/\\%20}"
    assert not guard.active
    assert guard.protect(text) == text
    assert guard.restore(text) == text


def test_restore_only_touches_recorded_digests() -> None:
    guard = VerbatimGuard(VerbatimFields.from_names(["url"]))
    protected = guard.protect("url = {a}")
    foreign = "0123456789abcdef0123456789abcdef"
    assert guard.restore(f"{protected} {foreign}") == f"url = {{a}} {foreign}"


def test_guards_do_not_share_state() -> None:
    fields = VerbatimFields.from_names(["url"])
    first = VerbatimGuard(fields)
    second = VerbatimGuard(fields)

    protected = first.protect("url = {one}")

    assert len(first) == 1
    assert len(second) == 0
    assert second.restore(protected) == protected


def test_field_names_must_start_at_a_word_boundary() -> None:
    guard = VerbatimGuard(VerbatimFields.from_names(["url"]))
    text = "myurl = {\\'e}"
    assert guard.protect(text) == text
