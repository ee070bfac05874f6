"""
Streamlit session state and database initialization helpers.
"""

from __future__ import annotations

import streamlit as st

from deckcore import fsrs


SESSION_DEFAULTS = {
    "deck_id": None,
    "study_mode": None,          # "self" or "ai"
    "session_cards": [],
    "session_position": 0,
    "session_count": 0,
    "session_correct": 0,
    "session_limit": 20,
    "due_now_count": 0,
    "next_due_at": None,
    "show_answer": False,
    "grading_result": None,
    "chat_history": [],
}


def init_database() -> None:
    """
    Initialize database schema (cached per Streamlit process).
    """
    @st.cache_resource
    def _init_database() -> None:
        fsrs.init_db()

    _init_database()


def ensure_session_state(user_options: dict[str, str]) -> None:
    """
    Populate Streamlit session_state with defaults.
    """
    if "user_id" not in st.session_state:
        default_user_id = fsrs.get_default_user_id()
        st.session_state.user_id = default_user_id
        st.session_state.user_label = next(
            (label for label, uid in user_options.items() if uid == default_user_id),
            default_user_id
        )
    for key, value in SESSION_DEFAULTS.items():
        if key not in st.session_state:
            st.session_state[key] = list(value) if isinstance(value, list) else value


def reset_study_state() -> None:
    """Clear the active session (keeps user and deck selection)."""
    for key, value in SESSION_DEFAULTS.items():
        if key in ("deck_id", "session_limit"):
            continue
        st.session_state[key] = list(value) if isinstance(value, list) else value
