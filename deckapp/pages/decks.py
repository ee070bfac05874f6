"""
Deck management page rendering.
"""

from __future__ import annotations

import pandas as pd
import streamlit as st

from deckcore import decks_repo
from deckcore.errors import StudyError


def render_decks_page(user_options: dict[str, str]) -> None:
    del user_options  # reserved for future sign-in integration

    st.subheader("Decks")
    user_id = st.session_state.user_id

    with st.form("create_deck", clear_on_submit=True):
        title = st.text_input("New deck title")
        if st.form_submit_button("Create Deck") and title.strip():
            try:
                decks_repo.create_deck(user_id, title)
            except StudyError as exc:
                st.error(str(exc))
            else:
                st.rerun()

    decks = decks_repo.list_decks(user_id)
    if not decks:
        st.info("No decks yet.")
        return

    labels = {deck["title"]: deck["id"] for deck in decks}
    selected = st.selectbox("Deck", list(labels), key="decks_page_deck")
    deck_id = labels[selected]

    with st.form("add_card", clear_on_submit=True):
        question = st.text_area("Question", height=80)
        answer = st.text_area("Answer", height=80)
        if st.form_submit_button("Add Card"):
            try:
                decks_repo.add_card(user_id, deck_id, question, answer)
            except StudyError as exc:
                st.error(str(exc))
            else:
                st.rerun()

    cards = decks_repo.list_cards(user_id, deck_id)
    if not cards:
        st.info("This deck has no cards yet.")
        return

    df = pd.DataFrame(cards)[
        ["question", "answer", "due_at", "interval_minutes", "repetitions", "ease_factor"]
    ]
    st.dataframe(df, use_container_width=True, hide_index=True)
