"""Inline chat panel: questions over exactly the items in view."""

from __future__ import annotations

import streamlit as st

from ui.state import run
from webstash.app_state import AppState, AskResult
from webstash.display import Card, cards_for
from webstash.normalize import PlainText

_PLACEHOLDER = "What is my favorite hashtag?"


def _sync_sliders(state: AppState) -> None:
    """Initialise slider values from the session manager.

    Seeding is attempted once here; later retries happen only on Ask.
    """
    sessions = state.sessions
    if not sessions.defaults_seeded:
        run(sessions.seed_defaults())
    if sessions.defaults_seeded and not st.session_state.get("_sliders_seeded"):
        st.session_state.temperature = sessions.temperature
        st.session_state.top_k = sessions.top_k
        st.session_state._sliders_seeded = True
    st.session_state.setdefault("temperature", sessions.temperature)
    st.session_state.setdefault("top_k", sessions.top_k)


def _on_temperature(state: AppState) -> None:
    state.sessions.set_temperature(st.session_state.temperature)


def _on_top_k(state: AppState) -> None:
    state.sessions.set_top_k(st.session_state.top_k)


def _on_reset(state: AppState) -> None:
    state.reset_chat()
    st.session_state.pop("chat_result", None)
    st.session_state.chat_started = False


def _render_card(card: Card) -> None:
    if card.text is not None:
        st.markdown(card.text)
        return
    with st.container(border=True):
        if card.header:
            st.markdown(f"**{card.header}**")
        for key, value in card.rows:
            st.markdown(f"`{key}:` {value}")


def _render_result(result: AskResult) -> None:
    if result.error:
        st.error(result.error)
        return
    if isinstance(result.response, PlainText):
        st.markdown(result.response.text)
    else:
        cards = cards_for(result.response)
        if not cards:
            st.caption("No data returned.")
        for card in cards:
            _render_card(card)
    st.caption(f"*{result.latency_ms:.0f} ms* · {result.item_count} items")


def render(state: AppState) -> None:
    """Render the chat panel for the current filtered view."""
    if not st.toggle("💬 Ask about these items", key="chat_open"):
        return

    with st.container(border=True):
        _sync_sliders(state)

        col_t, col_k = st.columns(2)
        col_t.slider(
            "Temperature",
            min_value=0.0,
            max_value=2.0,
            step=0.1,
            key="temperature",
            on_change=_on_temperature,
            args=(state,),
        )
        col_k.slider(
            "Top-K",
            min_value=1,
            max_value=max(state.sessions.max_top_k, 2),
            step=1,
            key="top_k",
            on_change=_on_top_k,
            args=(state,),
        )

        question = st.text_input(
            "Question", key="question", placeholder=_PLACEHOLDER
        )
        col_ask, col_reset, _ = st.columns([1, 1, 3])
        ask = col_ask.button(
            "Ask", type="primary", disabled=not question.strip()
        )
        col_reset.button(
            "Reset",
            disabled=not st.session_state.get("chat_started"),
            on_click=_on_reset,
            args=(state,),
        )

        if ask:
            st.session_state.chat_started = True
            with st.spinner("Thinking..."):
                st.session_state.chat_result = run(state.ask(question))

        result = st.session_state.get("chat_result")
        if result is not None:
            _render_result(result)
