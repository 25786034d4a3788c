"""Application state shared by the Streamlit app and the CLI.

``AppState`` is the only writer of the item cache, the last filtered view and
the model session. Every mutation happens on the caller's thread in response
to a discrete user action.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from webstash.config import Settings
from webstash.dataset import items_to_jsonl
from webstash.filtering import filter_items
from webstash.models import Item, SortOrder
from webstash.normalize import NormalizedResponse, normalize_response
from webstash.prompts import build_grounded_prompt
from webstash.session import ModelSessionManager, OllamaFacility
from webstash.storage import ItemStorage, export_document

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong while generating a response."


@dataclass
class AskResult:
    """Outcome of a grounded question."""

    response: Optional[NormalizedResponse]
    error: Optional[str]
    latency_ms: float
    item_count: int


@dataclass
class AppState:
    storage: ItemStorage
    sessions: ModelSessionManager
    settings: Settings
    items: list[Item] = field(default_factory=list)
    last_filtered: list[Item] = field(default_factory=list)
    query: str = ""
    order: SortOrder = SortOrder.NEWEST

    @classmethod
    def from_settings(cls, settings: Settings) -> AppState:
        """Build and load the state with the Ollama facility."""
        state = cls(
            storage=ItemStorage(settings.storage_path, settings.storage_key),
            sessions=ModelSessionManager(OllamaFacility(settings), settings),
            settings=settings,
        )
        state.load()
        return state

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def load(self) -> None:
        self.items = self.storage.load()
        self.refresh_view()

    def save_item(self, title: str, content: str, tags: str = "") -> Optional[Item]:
        """Create and persist a new item; blank content is ignored."""
        if not (content or "").strip():
            return None
        item = Item.create(title, content, tags)
        updated = [item, *self.items]
        self.storage.save_all(updated)
        self.items = updated
        self.refresh_view()
        logger.info("Saved %s item %s", item.type.value, item.id)
        return item

    def delete_item(self, item_id: str) -> bool:
        updated = [it for it in self.items if it.id != item_id]
        if len(updated) == len(self.items):
            return False
        self.storage.save_all(updated)
        self.items = updated
        self.refresh_view()
        logger.info("Deleted item %s", item_id)
        return True

    def get_item(self, item_id: str) -> Optional[Item]:
        return next((it for it in self.items if it.id == item_id), None)

    def export(self) -> dict[str, Any]:
        """Export payload for every item, ignoring the current filters."""
        return export_document(self.items)

    # ------------------------------------------------------------------
    # Browse
    # ------------------------------------------------------------------

    def refresh_view(
        self, query: Optional[str] = None, order: Optional[SortOrder | str] = None
    ) -> list[Item]:
        """Recompute and cache the filtered view."""
        if query is not None:
            self.query = query
        if order is not None:
            self.order = SortOrder(order)
        self.last_filtered = filter_items(self.items, self.query, self.order)
        return list(self.last_filtered)

    def clear_filters(self) -> list[Item]:
        return self.refresh_view(query="", order=SortOrder.NEWEST)

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    def build_prompt(self, question: str) -> str:
        """Grounded prompt over exactly the items currently in view."""
        dataset = items_to_jsonl(
            self.last_filtered,
            max_items=self.settings.dataset_max_items,
            max_content_chars=self.settings.dataset_max_content_chars,
        )
        return build_grounded_prompt(dataset, question)

    async def ask(self, question: str) -> Optional[AskResult]:
        """Ask a question over the filtered view; failures become ``error``."""
        question = (question or "").strip()
        if not question:
            return None

        start = time.perf_counter()
        item_count = min(len(self.last_filtered), self.settings.dataset_max_items)
        prompt = self.build_prompt(question)

        try:
            raw = await self.sessions.prompt(prompt)
        except Exception as e:
            logger.error("Question failed: %s", e)
            latency_ms = (time.perf_counter() - start) * 1000
            return AskResult(
                response=None,
                error=str(e) or GENERIC_ERROR,
                latency_ms=round(latency_ms, 1),
                item_count=item_count,
            )

        latency_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Answered question over %d items latency=%.0fms", item_count, latency_ms
        )
        return AskResult(
            response=normalize_response(raw),
            error=None,
            latency_ms=round(latency_ms, 1),
            item_count=item_count,
        )

    def reset_chat(self) -> None:
        self.sessions.reset()
