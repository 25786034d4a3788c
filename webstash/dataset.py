"""JSON-Lines dataset built from the visible items for grounded questions."""

from __future__ import annotations

import json

from webstash.models import Item

MAX_ITEMS = 200
MAX_CONTENT_CHARS = 400


def item_to_line(item: Item, max_content_chars: int = MAX_CONTENT_CHARS) -> str:
    """One compact JSON object with a truncated content snippet."""
    record = {
        "id": item.id,
        "title": item.title or "",
        "tags": list(item.tags),
        "content": (item.content or "")[:max_content_chars],
        "createdAt": item.created_at,
        "type": item.type.value,
    }
    return json.dumps(record, ensure_ascii=False, separators=(",", ":"))


def items_to_jsonl(
    items: list[Item],
    max_items: int = MAX_ITEMS,
    max_content_chars: int = MAX_CONTENT_CHARS,
) -> str:
    """Serialise at most *max_items* items, in the given order, one per line."""
    return "\n".join(item_to_line(it, max_content_chars) for it in items[:max_items])
