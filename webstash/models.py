"""Pydantic models for saved items."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import Enum
from urllib.parse import urlparse
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

_TAG_SPLIT_RE = re.compile(r"[\s,]+")
_IMAGE_RE = re.compile(r"\.(png|jpe?g|gif|webp|svg)$")
_VIDEO_RE = re.compile(r"\.(mp4|webm|mov|m4v|avi)$")


class ItemType(str, Enum):
    """Kind of saved item, derived from its content at creation."""

    NOTE = "note"
    LINK = "link"
    IMAGE = "image"
    VIDEO = "video"


class SortOrder(str, Enum):
    """Browse ordering."""

    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE = "title"


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


def _dedupe_tags(tags: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for raw in tags:
        tag = raw.strip()
        if tag.startswith("#"):
            tag = tag[1:]
        tag = tag.lower()
        if tag and tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def normalize_tags(raw: str | None) -> list[str]:
    """Turn free-form tag input into a clean tag list.

    Splits on whitespace and commas, drops a leading ``#``, lowercases and
    deduplicates while keeping first-seen order::

        >>> normalize_tags("#Rocket, space rocket")
        ['rocket', 'space']
    """
    if not raw:
        return []
    return _dedupe_tags([t for t in _TAG_SPLIT_RE.split(raw) if t])


def classify_content(content: str | None) -> ItemType:
    """Classify content as a note, link, image or video.

    Only absolute URLs are links; media types are recognised by the file
    extension of the URL path. Never raises.
    """
    if not content:
        return ItemType.NOTE
    try:
        url = urlparse(content.strip())
    except ValueError:
        return ItemType.NOTE
    if not url.scheme or not url.netloc:
        return ItemType.NOTE

    path = (url.path or "").lower()
    if _IMAGE_RE.search(path):
        return ItemType.IMAGE
    if _VIDEO_RE.search(path):
        return ItemType.VIDEO
    return ItemType.LINK


class Item(BaseModel):
    """A single saved note, link or media reference."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: str = Field(
        default_factory=now_iso,
        alias="createdAt",
        description="ISO-8601 creation timestamp",
    )
    title: str = Field(default="", description="Optional display label")
    content: str = Field(..., min_length=1, description="Saved text or URL")
    tags: list[str] = Field(default_factory=list, description="Lowercase tags")
    type: ItemType = ItemType.NOTE

    @field_validator("title", mode="before")
    @classmethod
    def _title_default(cls, value: str | None) -> str:
        return value or ""

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str]) -> list[str]:
        return _dedupe_tags(value)

    @classmethod
    def create(cls, title: str | None, content: str, tags: str | None = None) -> Item:
        """Build a new item from raw form input, deriving its type once."""
        content = (content or "").strip()
        return cls(
            title=(title or "").strip(),
            content=content,
            tags=normalize_tags(tags),
            type=classify_content(content),
        )

    def to_record(self) -> dict:
        """Serialise with the stored field names (``createdAt``)."""
        return self.model_dump(mode="json", by_alias=True)
