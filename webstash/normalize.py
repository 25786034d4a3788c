"""Recover structured data from raw model replies.

Models asked for a grounded answer sometimes reply with JSON, JSON-Lines, a
fenced code block, or JSON buried in prose. :func:`normalize_response` tries
each shape in turn and falls back to the reply as plain text. It never raises.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Union

_BOM = "\ufeff"
_FENCE_RE = re.compile(r"^\s*```(?:json|javascript)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_NOT_PARSED = object()


@dataclass(frozen=True)
class StructuredSequence:
    """The reply contained JSON; ``items`` holds the decoded records."""

    items: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class PlainText:
    """The reply is prose."""

    text: str = ""


NormalizedResponse = Union[StructuredSequence, PlainText]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def _loads(text: str) -> Any:
    """Strict JSON decode (no NaN/Infinity); returns ``_NOT_PARSED`` on failure."""
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return _NOT_PARSED


def _as_sequence(value: Any) -> StructuredSequence:
    if isinstance(value, list):
        return StructuredSequence(list(value))
    return StructuredSequence([value])


def strip_bom(text: str) -> str:
    return text[1:] if text.startswith(_BOM) else text


def strip_code_fence(text: str) -> str:
    """Return the body of a leading ```json fenced block, or *text* as is."""
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text


def parse_direct(text: str) -> Any:
    """Parse the whole text, which must open with ``{`` or ``[``."""
    stripped = text.strip()
    if not stripped.startswith(("{", "[")):
        return _NOT_PARSED
    return _loads(stripped)


def parse_json_lines(text: str) -> Optional[list[dict[str, Any]]]:
    """Parse every ``{...}`` line; ``None`` unless at least one is an object."""
    records: list[dict[str, Any]] = []
    for line in text.splitlines():
        line = line.strip()
        if not (line.startswith("{") and line.endswith("}")):
            continue
        value = _loads(line)
        if isinstance(value, dict):
            records.append(value)
    return records or None


class JsonBlockScanner:
    """Finds the first balanced ``{...}`` or ``[...]`` block in a text.

    Tracks nesting depth of the opening bracket type only, and ignores
    brackets inside double-quoted strings. A quote closes a string unless it
    is escaped by a preceding, itself unescaped, backslash.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.depth = 0
        self.in_string = False
        self.escaped = False

    def _start(self) -> int:
        positions = [p for p in (self.text.find("{"), self.text.find("[")) if p >= 0]
        return min(positions) if positions else -1

    def feed(self, ch: str, open_char: str, close_char: str) -> bool:
        """Advance over one character; ``True`` once the block closes."""
        if self.in_string:
            if self.escaped:
                self.escaped = False
            elif ch == "\\":
                self.escaped = True
            elif ch == '"':
                self.in_string = False
            return False

        if ch == '"':
            self.in_string = True
        elif ch == open_char:
            self.depth += 1
        elif ch == close_char:
            self.depth -= 1
            return self.depth == 0
        return False

    def find_block(self) -> Optional[str]:
        """Return the substring of the first balanced block, if it closes."""
        start = self._start()
        if start < 0:
            return None
        open_char = self.text[start]
        close_char = "}" if open_char == "{" else "]"
        for i in range(start, len(self.text)):
            if self.feed(self.text[i], open_char, close_char):
                return self.text[start : i + 1]
        return None


def extract_embedded_json(text: str) -> Any:
    """Decode the first balanced block; a single attempt, no further search."""
    block = JsonBlockScanner(text).find_block()
    if block is None:
        return _NOT_PARSED
    return parse_direct(block)


def normalize_response(raw: Any) -> NormalizedResponse:
    """Classify a model reply as structured records or plain text."""
    if raw is None:
        return PlainText("")
    if not isinstance(raw, str):
        return _as_sequence(raw)

    body = strip_code_fence(strip_bom(raw.strip()))

    value = parse_direct(body)
    if value is not _NOT_PARSED:
        return _as_sequence(value)

    records = parse_json_lines(body)
    if records is not None:
        return StructuredSequence(records)

    value = extract_embedded_json(body)
    if value is not _NOT_PARSED:
        return _as_sequence(value)

    return PlainText(raw)
