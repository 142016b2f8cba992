"""
Wire Format Decoder

Tolerant field extraction from the server's JSON-shaped text payloads.

The remote authority builds its messages by string concatenation, so inbound
text is not guaranteed to be well-formed JSON. Nothing here parses a full
document: each helper locates one key (first case-insensitive occurrence of
``"key":``) and reads the value that follows. Scalar extractors never raise;
any failure returns the caller's default.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import TypeVar

from deserver_client.errors import MeshDataError
from deserver_client.logging import get_logger

logger = get_logger("wire.decoder")

T = TypeVar("T")

_NUMERIC_CHARS = frozenset("0123456789+-.eE")
TIMELINE_SEPARATOR = "},{"


@dataclass(frozen=True)
class TimelineEntry:
    """One scheduled sub-command of a timeline."""

    offset: float
    payload: str


@lru_cache(maxsize=256)
def _key_pattern(key: str, opener: str) -> re.Pattern[str]:
    return re.compile(r'"' + re.escape(key) + r'"\s*:\s*' + re.escape(opener), re.IGNORECASE)


def _locate(payload: str | None, key: str, opener: str = "") -> int:
    """Index just past ``"key":`` (and the opener, if given), or -1."""
    if not payload:
        return -1
    match = _key_pattern(key, opener).search(payload)
    return match.end() if match else -1


def _read_quoted(text: str, start: int) -> tuple[str | None, int]:
    """Read raw string content from start up to the next unescaped quote.

    Returns the raw (still escaped) content and the index after the closing
    quote, or (None, len(text)) when the string never closes.
    """
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == '"':
            return text[start:i], i + 1
        i += 1
    return None, n


def unescape(raw: str) -> str:
    """Undo the ``\\"`` and ``\\\\`` escapes; other sequences pass through."""
    if "\\" not in raw:
        return raw
    out = []
    i = 0
    n = len(raw)
    while i < n:
        ch = raw[i]
        if ch == "\\" and i + 1 < n and raw[i + 1] in ('"', "\\"):
            out.append(raw[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def extract_string(payload: str | None, key: str, default: str | None = None) -> str | None:
    """Read a quoted string value."""
    idx = _locate(payload, key, '"')
    if idx < 0:
        return default
    raw, _ = _read_quoted(payload, idx)
    if raw is None:
        return default
    return unescape(raw)


def extract_float(payload: str | None, key: str, default: float = 0.0) -> float:
    """Read a number using dot-decimal rules regardless of locale."""
    idx = _locate(payload, key)
    if idx < 0:
        return default
    end = idx
    while end < len(payload) and payload[end] in _NUMERIC_CHARS:
        end += 1
    try:
        return float(payload[idx:end])
    except ValueError:
        return default


def extract_bool(payload: str | None, key: str, default: bool = False) -> bool:
    """Read a literal true/false."""
    idx = _locate(payload, key)
    if idx < 0:
        return default
    head = payload[idx : idx + 5].lower()
    if head.startswith("true"):
        return True
    if head == "false":
        return False
    return default


def extract_component_map(payload: str | None) -> dict[str, bool]:
    """
    Read the ``"components":{"Name":bool,...}`` map.

    Only one nesting level is understood: the first close brace ends the scan.
    A malformed entry (non-boolean value, unterminated name) stops the scan,
    keeping whatever was read before it.
    """
    result: dict[str, bool] = {}
    idx = _locate(payload, "components", "{")
    if idx < 0:
        return result

    n = len(payload)
    while idx < n:
        # Next name, unless the map closes first
        while idx < n and payload[idx] != '"':
            if payload[idx] == "}":
                return result
            idx += 1
        if idx >= n:
            break

        raw, idx = _read_quoted(payload, idx + 1)
        if raw is None:
            break
        name = unescape(raw)

        while idx < n and payload[idx] != ":":
            idx += 1
        idx += 1
        while idx < n and payload[idx].isspace():
            idx += 1

        if payload.startswith("true", idx):
            result[name] = True
            idx += 4
        elif payload.startswith("false", idx):
            result[name] = False
            idx += 5
        else:
            logger.debug(f"Component map entry {name!r} has no boolean value; stopping scan")
            break

        while idx < n and payload[idx] not in ",}":
            idx += 1
        if idx < n and payload[idx] == "}":
            break
        idx += 1

    return result


def extract_string_array(payload: str | None, key: str) -> list[str] | None:
    """
    Read ``"key":["...", ...]`` as a list of unescaped strings.

    Returns:
        None when the key is absent, otherwise the elements read before the
        closing bracket (brackets inside element text do not close the array).
    """
    idx = _locate(payload, key, "[")
    if idx < 0:
        return None

    items: list[str] = []
    n = len(payload)
    while idx < n:
        ch = payload[idx]
        if ch == "]":
            break
        if ch == '"':
            raw, idx = _read_quoted(payload, idx + 1)
            if raw is None:
                break
            items.append(unescape(raw))
            continue
        idx += 1
    return items


def extract_command_array(payload: str | None) -> list[str] | None:
    """Commands from a poll response; None means no ``commands`` key at all."""
    return extract_string_array(payload, "commands")


def _array_end(text: str, start: int) -> int:
    """Index of the ``]`` closing the array whose body starts at start."""
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            _, i = _read_quoted(text, i + 1)
            continue
        if ch == "]":
            return i
        i += 1
    return n


def extract_timeline_entries(payload: str | None) -> list[TimelineEntry]:
    """
    Read ``"entries":[{"offset":n,"json":"..."}, ...]`` in wire order.

    The array body is split on the literal ``},{``, each piece re-wrapped in
    braces and its ``offset`` (default 0) and ``json`` (default ``{}``)
    fields read. An embedded payload that itself contains ``},{`` is split
    apart as well; that is a known limitation of the format.
    """
    idx = _locate(payload, "entries", "[")
    if idx < 0:
        return []

    body = payload[idx : _array_end(payload, idx)].strip()
    if not body:
        return []

    entries = []
    for piece in body.split(TIMELINE_SEPARATOR):
        piece = piece.strip()
        if not piece:
            continue
        if not piece.startswith("{"):
            piece = "{" + piece
        if not piece.endswith("}"):
            piece += "}"
        entries.append(
            TimelineEntry(
                offset=extract_float(piece, "offset", 0.0),
                payload=extract_string(piece, "json", "{}"),
            )
        )
    return entries


def extract_number_array(payload: str | None, key: str, parse: Callable[[str], T] = float) -> list[T]:
    """
    Read ``"key":[n, n, ...]`` strictly.

    Raises:
        MeshDataError: if the array is missing, unterminated or holds a value
            that does not parse.
    """
    idx = _locate(payload, key, "[")
    if idx < 0:
        raise MeshDataError(f"Array {key!r} missing")
    end = payload.find("]", idx)
    if end < 0:
        raise MeshDataError(f"Array {key!r} not terminated")

    values = []
    for part in payload[idx:end].split(","):
        part = part.strip()
        if not part:
            continue
        try:
            values.append(parse(part))
        except ValueError as e:
            raise MeshDataError(f"Bad value {part!r} in array {key!r}") from e
    return values
