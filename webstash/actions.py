"""Best-effort per-item actions.

These never raise; callers get an :class:`ActionResult` they are free to
ignore.
"""

from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass

from webstash.models import Item, ItemType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    message: str = ""


def open_item(item: Item) -> ActionResult:
    """Open a link, image or video item in a new browser tab."""
    if item.type is ItemType.NOTE:
        return ActionResult(False, "Notes have no URL to open.")
    try:
        opened = webbrowser.open_new_tab(item.content)
    except webbrowser.Error as e:
        logger.warning("Could not open %s: %s", item.content, e)
        return ActionResult(False, str(e))
    if not opened:
        return ActionResult(False, "No browser available.")
    return ActionResult(True, f"Opened {item.content}")
