"""JSON file-based item store.

The whole item list is kept under a single key of a JSON document, the way a
browser extension keeps it in local storage. Other keys in the document are
left untouched on write.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from webstash.config import STORAGE_KEY
from webstash.models import Item, now_iso

logger = logging.getLogger(__name__)

_ITEMS = TypeAdapter(list[Item])


class ItemStorage:
    """Reads and writes the full item list under a fixed key."""

    def __init__(self, storage_path: Path, key: str = STORAGE_KEY) -> None:
        self._path = Path(storage_path).expanduser()
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Failed to read %s: %s; treating as empty", self._path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring non-object document in %s", self._path)
            return {}
        return raw

    def load(self) -> list[Item]:
        """Return every stored item, or an empty list if absent or malformed."""
        value = self._read_document().get(self._key)
        if not isinstance(value, list):
            if value is not None:
                logger.warning("Malformed value under %r; starting fresh", self._key)
            return []
        try:
            items = _ITEMS.validate_python(value)
        except ValidationError as exc:
            logger.warning(
                "Invalid items under %r (%d errors); starting fresh",
                self._key,
                exc.error_count(),
            )
            return []
        logger.info("Loaded %d items from %s", len(items), self._path)
        return items

    def save_all(self, items: list[Item]) -> None:
        """Replace the stored item list."""
        document = self._read_document()
        document[self._key] = [item.to_record() for item in items]
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(document, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        logger.debug("Persisted %d items to %s", len(items), self._path)


def export_document(items: list[Item]) -> dict[str, Any]:
    """Build the export payload for the full, unfiltered item list."""
    return {"exportedAt": now_iso(), "items": [item.to_record() for item in items]}


def write_export(items: list[Item], path: Path) -> Path:
    """Write the export payload to *path* as indented JSON."""
    path = Path(path)
    path.write_text(
        json.dumps(export_document(items), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    logger.info("Exported %d items to %s", len(items), path)
    return path
