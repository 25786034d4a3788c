"""Save page: form for new notes, links and media URLs."""

from __future__ import annotations

import streamlit as st

from ui.state import get_state


def render() -> None:
    """Render the save form."""
    state = get_state()
    st.title("📝 Save")

    with st.form("add-item", clear_on_submit=True):
        title = st.text_input("Title", placeholder="Optional")
        content = st.text_area("Content", placeholder="Text or URL")
        tags = st.text_input("Tags", placeholder="#space, rockets")
        submitted = st.form_submit_button("Save", type="primary")

    if not submitted:
        return
    item = state.save_item(title, content, tags)
    if item is None:
        st.warning("Nothing to save; content is empty.")
        return
    st.toast(f"Saved ✓ ({item.type.value})")
