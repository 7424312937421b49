"""
mgmt_access.auth.properties

Loader for the static user/role properties file.

Responsibilities:
- Parse `username = role1,role2` lines (java.util.Properties syntax, escapes included).
- Degrade a missing or unreadable file to an empty mapping plus a warning.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from pathlib import Path

from mgmt_access.observability.logging import get_logger

log = get_logger(__name__)

_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def parse_properties(lines: Iterable[str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for logical in _logical_lines(lines):
        key, value = _split(logical)
        out[key] = value
    return out


def _logical_lines(lines: Iterable[str]) -> Iterator[str]:
    pending: str | None = None
    for raw in lines:
        line = raw.rstrip("\r\n").lstrip(_WHITESPACE)
        # Comments and blank lines only count at the start of a logical line.
        if pending is None and (not line or line[0] in "#!"):
            continue
        # An odd run of trailing backslashes continues the logical line.
        if (len(line) - len(line.rstrip("\\"))) % 2 == 1:
            pending = (pending or "") + line[:-1]
            continue
        yield (pending or "") + line
        pending = None
    if pending:
        yield pending


def _split(logical: str) -> tuple[str, str]:
    n = len(logical)
    i = 0
    while i < n:
        c = logical[i]
        if c == "\\":
            i += 2
            continue
        if c in _SEPARATORS or c in _WHITESPACE:
            break
        i += 1
    key_end = min(i, n)

    j = key_end
    while j < n and logical[j] in _WHITESPACE:
        j += 1
    if j < n and logical[j] in _SEPARATORS:
        j += 1
        while j < n and logical[j] in _WHITESPACE:
            j += 1
    return _unescape(logical[:key_end]), _unescape(logical[j:])


def _unescape(s: str) -> str:
    out: list[str] = []
    n = len(s)
    i = 0
    while i < n:
        c = s[i]
        if c != "\\":
            out.append(c)
            i += 1
            continue
        if i + 1 >= n:
            break
        nxt = s[i + 1]
        if nxt == "u":
            digits = s[i + 2 : i + 6]
            if len(digits) != 4 or not all(d in "0123456789abcdefABCDEF" for d in digits):
                raise ValueError(f"Malformed \\uxxxx escape in {s!r}")
            out.append(chr(int(digits, 16)))
            i += 6
            continue
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _decode(raw: bytes, path: Path) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        # java.util.Properties reads ISO-8859-1; files written that way are still valid.
        log.info("user_properties_latin1", path=str(path))
        return raw.decode("iso-8859-1")


def load_user_properties(path: Path | None) -> dict[str, str]:
    if path is None or not path.is_file():
        log.warning("user_properties_missing", path=str(path) if path else None)
        return {}
    try:
        with path.open("rb") as fh:
            raw = fh.read()
        return parse_properties(_LINE_BREAK.split(_decode(raw, path)))
    except (OSError, ValueError) as e:
        log.warning("user_properties_unreadable", path=str(path), error=str(e))
        return {}
