"""
Flashcard Study - Main App

Streamlit UI over the spaced-repetition study core.

Run with:
    streamlit run deckapp/streamlit_app.py
"""

import logging

import streamlit as st

from deckapp.router import PAGES
from deckapp.state import ensure_session_state, init_database, reset_study_state


# ---- User Configuration ----

USER_OPTIONS = {
    "Demo": "demo",
    "Test": "test",
}


# ---- Page Setup ----

st.set_page_config(
    page_title="Flashcard Study",
    page_icon="🗂️",
    layout="centered"
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

init_database()
ensure_session_state(USER_OPTIONS)


def render_user_selector() -> None:
    user_labels = list(USER_OPTIONS.keys())
    selected_label = st.sidebar.selectbox(
        "User",
        user_labels,
        index=user_labels.index(st.session_state.user_label)
        if st.session_state.user_label in user_labels
        else 0
    )
    if USER_OPTIONS[selected_label] != st.session_state.user_id:
        reset_study_state()
        st.session_state.deck_id = None
    st.session_state.user_label = selected_label
    st.session_state.user_id = USER_OPTIONS[selected_label]


# ---- Main App ----

def main():
    """Main app entry point."""
    render_user_selector()
    tabs = st.tabs([page.title for page in PAGES])
    for tab, page in zip(tabs, PAGES):
        with tab:
            page.render(USER_OPTIONS)


if __name__ == "__main__":
    main()
