"""
tests.test_properties

User properties file parsing and failure degradation.
"""

from __future__ import annotations

from pathlib import Path

from structlog.testing import capture_logs

from mgmt_access.auth.properties import load_user_properties, parse_properties


def test_parse_separators_comments_and_whitespace() -> None:
    lines = [
        "# comment",
        "! also a comment",
        "",
        "alice=admin,ops",
        "  bob : ROLE_ADMIN",
        "carol ROLE_AUDIT",
        "dave = ",
    ]
    assert parse_properties(lines) == {
        "alice": "admin,ops",
        "bob": "ROLE_ADMIN",
        "carol": "ROLE_AUDIT",
        "dave": "",
    }


def test_parse_line_continuation_and_escapes() -> None:
    lines = [
        "alice = ROLE_ADMIN,\\",
        "        ROLE_OPS",
        "first\\=last=ROLE_X",
    ]
    assert parse_properties(lines) == {
        "alice": "ROLE_ADMIN,ROLE_OPS",
        "first=last": "ROLE_X",
    }


def test_later_keys_override_earlier() -> None:
    assert parse_properties(["a=1", "a=2"]) == {"a": "2"}


def test_load_reads_file(tmp_path: Path) -> None:
    p = tmp_path / "user-details.properties"
    p.write_text("alice=admin,ops\n", encoding="utf-8")
    assert load_user_properties(p) == {"alice": "admin,ops"}


def test_load_directory_is_treated_as_missing(tmp_path: Path) -> None:
    with capture_logs() as logs:
        assert load_user_properties(tmp_path) == {}
    assert [e["event"] for e in logs] == ["user_properties_missing"]


def test_parse_unicode_and_character_escapes() -> None:
    lines = [
        "j\\u00f6rg=ops",
        "tab\\tkey=a\\nb",
        "form\\ffeed=ROLE_\\u0041DMIN",
    ]
    assert parse_properties(lines) == {
        "jörg": "ops",
        "tab\tkey": "a\nb",
        "form\ffeed": "ROLE_ADMIN",
    }


def test_escaped_backslash_does_not_escape_separator() -> None:
    assert parse_properties(["a\\\\=b"]) == {"a\\": "b"}
    assert parse_properties(["a\\\\ b"]) == {"a\\": "b"}


def test_continuation_after_escaped_backslash_is_not_a_continuation() -> None:
    assert parse_properties(["a=b\\\\", "c=d"]) == {"a": "b\\", "c": "d"}


def test_load_latin1_file(tmp_path: Path) -> None:
    p = tmp_path / "user-details.properties"
    p.write_bytes("alice=admin\njörg=ops\n".encode("iso-8859-1"))
    with capture_logs() as logs:
        assert load_user_properties(p) == {"alice": "admin", "jörg": "ops"}
    assert not [e for e in logs if e["log_level"] == "warning"]


def test_load_utf8_file_with_bom_and_crlf(tmp_path: Path) -> None:
    p = tmp_path / "user-details.properties"
    p.write_bytes("\ufeffjörg=ops\r\nalice=admin\r\n".encode("utf-8"))
    assert load_user_properties(p) == {"jörg": "ops", "alice": "admin"}


def test_load_malformed_unicode_escape_degrades_to_empty(tmp_path: Path) -> None:
    p = tmp_path / "broken.properties"
    p.write_text("alice=\\u00zz\n", encoding="utf-8")
    with capture_logs() as logs:
        assert load_user_properties(p) == {}
    warnings = [e for e in logs if e["log_level"] == "warning"]
    assert [e["event"] for e in warnings] == ["user_properties_unreadable"]
