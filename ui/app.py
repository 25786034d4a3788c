"""WebStash — Streamlit save-and-browse interface.

Run with:
    streamlit run ui/app.py
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Ensure the project root is on sys.path so `ui.*` imports resolve
# regardless of the working directory Streamlit uses.
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import streamlit as st  # noqa: E402

from webstash.config import settings  # noqa: E402

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)

st.set_page_config(
    page_title="WebStash",
    page_icon="📌",
    layout="centered",
)

from ui.components import browse, save  # noqa: E402

# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

page = st.navigation(
    [
        st.Page(save.render, title="Save", icon="📝", default=True, url_path="save"),
        st.Page(browse.render, title="Browse", icon="🔎", url_path="browse"),
    ],
    position="top",
)

page.run()

st.divider()
st.caption(f"Items stored in {settings.storage_path} | Answers by {settings.ollama_model}")
