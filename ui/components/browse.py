"""Browse page: search, sort, date-grouped cards and the inline chat panel."""

from __future__ import annotations

import json
from datetime import datetime

import streamlit as st

from ui.components import chat
from ui.state import get_state
from webstash.display import format_value
from webstash.filtering import group_by_date
from webstash.models import Item, ItemType, SortOrder

_ORDER_LABELS: dict[SortOrder, str] = {
    SortOrder.NEWEST: "Newest first",
    SortOrder.OLDEST: "Oldest first",
    SortOrder.TITLE: "Title (A–Z)",
}


def _set_search(value: str) -> None:
    st.session_state.search_query = value


def _clear_filters() -> None:
    st.session_state.search_query = ""
    st.session_state.sort_order = SortOrder.NEWEST


def _delete(item_id: str) -> None:
    get_state().delete_item(item_id)


def _card_title(item: Item) -> str:
    if item.title:
        return item.title
    return "Note" if item.type is ItemType.NOTE else item.type.value.upper()


def _render_item(item: Item) -> None:
    """One saved item with its tags and actions."""
    with st.container(border=True):
        st.markdown(f"**{_card_title(item)}**")
        st.caption(f"{item.type.value} • {format_value('createdAt', item.created_at)}")

        if item.type is ItemType.NOTE:
            st.text(item.content)
        else:
            st.code(item.content, language=None)

        if item.tags:
            cols = st.columns(min(len(item.tags), 6))
            for i, tag in enumerate(item.tags):
                cols[i % len(cols)].button(
                    f"#{tag}",
                    key=f"tag-{item.id}-{tag}",
                    on_click=_set_search,
                    args=(f"#{tag}",),
                    type="tertiary",
                )

        left, right = st.columns([3, 1])
        if item.type is not ItemType.NOTE:
            left.link_button("Open", item.content)
        right.button("Delete", key=f"del-{item.id}", on_click=_delete, args=(item.id,))


def render() -> None:
    """Render the browse page."""
    state = get_state()
    st.title("🔎 Browse")

    st.session_state.setdefault("search_query", state.query)
    st.session_state.setdefault("sort_order", state.order)

    col_q, col_order = st.columns([3, 1])
    query = col_q.text_input(
        "Search", key="search_query", placeholder="text and/or #tags"
    )
    order = col_order.selectbox(
        "Order",
        list(_ORDER_LABELS),
        key="sort_order",
        format_func=_ORDER_LABELS.get,
    )
    visible = state.refresh_view(query=query, order=order)

    col_clear, col_export, _ = st.columns([1, 1, 2])
    col_clear.button("Clear filters", on_click=_clear_filters)
    col_export.download_button(
        "Export JSON",
        data=json.dumps(state.export(), ensure_ascii=False, indent=2),
        file_name="webstash-export.json",
        mime="application/json",
    )

    chat.render(state)

    st.caption(f"{len(visible)} of {len(state.items)} items")
    if not visible:
        st.info("No items match.")
        return

    for label, items in group_by_date(visible, today=datetime.now().date()).items():
        st.subheader(label)
        for item in items:
            _render_item(item)
