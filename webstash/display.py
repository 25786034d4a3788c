"""Turn normalised model output into display cards."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from webstash.normalize import NormalizedResponse, PlainText

_HEADER_KEYS = ("title", "name", "heading")


@dataclass(frozen=True)
class Card:
    """One record rendered as an optional header plus key/value rows."""

    header: Optional[str] = None
    rows: list[tuple[str, str]] = field(default_factory=list)
    text: Optional[str] = None  # set for non-object records


def _format_datetime(value: Any) -> str:
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        return str(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def format_value(key: str, value: Any) -> str:
    """Display string for one field of a record."""
    if key == "createdAt" and value:
        return _format_datetime(value)
    if isinstance(value, list):
        # tags read as "#rockets, #ai"
        return ", ".join(f"#{v}" if isinstance(v, str) else str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    if value is None:
        return ""
    return str(value)


def record_to_card(record: Any) -> Card:
    if not isinstance(record, dict):
        return Card(text=str(record))

    header = next((str(record[k]) for k in _HEADER_KEYS if record.get(k)), None)
    rows = [
        (str(key), format_value(str(key), value))
        for key, value in record.items()
        if key not in _HEADER_KEYS
    ]
    return Card(header=header, rows=rows)


def cards_for(result: NormalizedResponse) -> list[Card]:
    """Cards for a structured result; plain text yields a single text card."""
    if isinstance(result, PlainText):
        return [Card(text=result.text)]
    return [record_to_card(r) for r in result.items]
