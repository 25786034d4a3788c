"""Per-browser-session application state for the Streamlit app."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

import streamlit as st

from webstash.app_state import AppState
from webstash.config import settings

T = TypeVar("T")


def get_state() -> AppState:
    """Return this browser session's AppState, loading it on first use."""
    if "app_state" not in st.session_state:
        st.session_state.app_state = AppState.from_settings(settings)
    return st.session_state.app_state


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Drive a coroutine to completion from a Streamlit rerun."""
    return asyncio.run(coro)
