"""Search, sort and grouping over saved items."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

from webstash.models import Item, SortOrder

_EPOCH = datetime.min.replace(tzinfo=UTC)


@dataclass(frozen=True)
class SearchQuery:
    """A parsed search box value."""

    tags: list[str] = field(default_factory=list)
    text: str = ""


def parse_search_query(query: str | None) -> SearchQuery:
    """Split a query into ``#tag`` filters and a free-text term."""
    words = (query or "").split()
    tags = [w[1:].lower() for w in words if w.startswith("#") and len(w) > 1]
    text = " ".join(w for w in words if not w.startswith("#"))
    return SearchQuery(tags=tags, text=text)


def _contains(haystack: str | None, needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def matches(item: Item, query: SearchQuery) -> bool:
    """Text must appear in title, content or a tag; any requested tag suffices."""
    text_match = (
        not query.text
        or _contains(item.title, query.text)
        or _contains(item.content, query.text)
        or any(_contains(t, query.text) for t in item.tags)
    )
    tag_match = not query.tags or any(t in query.tags for t in item.tags)
    return text_match and tag_match


def created_at(item: Item) -> datetime:
    """Parse ``created_at``; unparseable values sort as the earliest instant."""
    try:
        parsed = datetime.fromisoformat(item.created_at)
    except (TypeError, ValueError):
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _title_key(item: Item) -> tuple[str, str]:
    title = item.title or ""
    # lowercase before uppercase on otherwise equal titles
    return title.casefold(), title.swapcase()


def sort_items(items: list[Item], order: SortOrder | str) -> list[Item]:
    order = SortOrder(order)
    if order is SortOrder.NEWEST:
        return sorted(items, key=created_at, reverse=True)
    if order is SortOrder.OLDEST:
        return sorted(items, key=created_at)
    return sorted(items, key=_title_key)


def filter_items(
    items: list[Item], query: str | None, order: SortOrder | str = SortOrder.NEWEST
) -> list[Item]:
    """Return the visible subset of *items* for a query and sort order."""
    parsed = parse_search_query(query)
    return sort_items([it for it in items if matches(it, parsed)], order)


def _date_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day:%b} {day.day}, {day.year}"


def group_by_date(items: list[Item], today: date | None = None) -> dict[str, list[Item]]:
    """Group items into dated sections, keeping their order.

    Labels are ``Today``, ``Yesterday`` or a short local date such as
    ``Oct 17, 2026``.
    """
    today = today or date.today()
    sections: dict[str, list[Item]] = {}
    for item in items:
        stamp = created_at(item)
        day = stamp.astimezone().date() if stamp != _EPOCH else stamp.date()
        sections.setdefault(_date_label(day, today), []).append(item)
    return sections
