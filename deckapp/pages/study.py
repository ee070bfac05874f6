"""
Study page rendering.
"""

from __future__ import annotations

from datetime import datetime, timezone

import streamlit as st

from deckapp.session_controller import (
    advance,
    ask_follow_up,
    current_card,
    end_session,
    process_answer,
    process_rating,
    start_new_session,
)
from deckapp.ui import (
    BACK_BG_COLOR,
    render_feedback_buttons,
    render_flashcard,
    render_session_complete,
    render_session_stats,
)
from deckcore import decks_repo, fsrs
from deckcore.grading.schemas import MAX_ANSWER_LENGTH, MAX_MESSAGE_LENGTH

STUDY_MODES = {
    "Self-graded": "self",
    "AI-graded": "ai",
}


def render_study_page(user_options: dict[str, str]) -> None:
    """
    Render the study flow (intro or active session).
    """
    if current_card() is None:
        _render_intro_screen()
        return

    if render_session_stats():
        end_session()
        st.rerun()

    if st.session_state.study_mode == "ai":
        _render_ai_graded_card()
    else:
        _render_self_graded_card()


def _format_due(due_at: datetime) -> str:
    delta = due_at - datetime.now(timezone.utc)
    minutes = max(0, int(delta.total_seconds() // 60))
    if minutes < 60:
        return f"in {minutes} min"
    if minutes < 24 * 60:
        return f"in {minutes // 60} h"
    return f"on {due_at:%Y-%m-%d}"


def _render_intro_screen() -> None:
    st.title("🗂️ Flashcard Study")
    if fsrs.is_test_mode():
        st.warning("⚠️ **TEST MODE** - Using test_deckstudy (set TEST_MODE=false in .env for production)")
    st.markdown(f"**Welcome {st.session_state.user_label}**")

    if st.session_state.session_count > 0:
        render_session_complete()
        if st.session_state.next_due_at is not None:
            st.caption(f"Next card due {_format_due(st.session_state.next_due_at)}")

    decks = decks_repo.list_decks(st.session_state.user_id)
    if not decks:
        st.info("No decks yet. Create one on the Decks tab.")
        return

    labels = {f"{deck['title']} ({deck['card_count']} cards)": deck["id"] for deck in decks}
    selected = st.selectbox("Deck", list(labels))
    mode_label = st.radio("Mode", list(STUDY_MODES), horizontal=True)
    st.session_state.session_limit = st.slider(
        "Cards per session", min_value=1, max_value=100, value=st.session_state.session_limit
    )

    if st.button("Start Session", type="primary", use_container_width=True):
        start_new_session(labels[selected], STUDY_MODES[mode_label])
        if current_card() is None and st.session_state.deck_id is not None:
            st.info("Nothing is due in this deck right now.")
        else:
            st.rerun()


def _render_self_graded_card() -> None:
    card = current_card()
    position = st.session_state.session_position

    if not st.session_state.show_answer:
        render_flashcard(card.question)
        st.markdown("<br>", unsafe_allow_html=True)
        if st.button("Reveal Answer", use_container_width=True, type="primary"):
            st.session_state.show_answer = True
            st.rerun()
        return

    render_flashcard(card.answer, subtitle=card.question, bg_color=BACK_BG_COLOR)
    st.markdown("<br>", unsafe_allow_html=True)
    rating = render_feedback_buttons(key_suffix=f"{card.id}_{position}")
    if rating is not None:
        process_rating(rating)


def _render_ai_graded_card() -> None:
    card = current_card()
    render_flashcard(card.question)
    st.markdown("<br>", unsafe_allow_html=True)

    result = st.session_state.grading_result
    if result is None:
        with st.form(key=f"answer_form_{st.session_state.session_position}"):
            answer = st.text_area("Your answer", height=120, max_chars=MAX_ANSWER_LENGTH)
            submitted = st.form_submit_button("Submit Answer", type="primary")
        if submitted and answer.strip():
            with st.spinner("Grading..."):
                graded = process_answer(answer.strip())
            if graded:
                st.rerun()
        return

    st.metric("Score", f"{result['score']}/100", help=f"Rated {result['rating']}")
    st.markdown(f"**Feedback:** {result['feedback']}")
    render_flashcard(result["ideal_answer"], subtitle="Ideal answer", bg_color=BACK_BG_COLOR)
    st.caption(f"Next review {_format_due(result['due_at'])}")

    for entry in st.session_state.chat_history[2:]:
        with st.chat_message(entry["role"]):
            st.markdown(entry["content"])

    with st.form(key=f"follow_up_form_{st.session_state.session_position}", clear_on_submit=True):
        message = st.text_input("Ask a follow-up question", max_chars=MAX_MESSAGE_LENGTH)
        asked = st.form_submit_button("Ask")
    if asked and message.strip():
        with st.spinner("Thinking..."):
            answered = ask_follow_up(message.strip())
        if answered:
            st.rerun()

    if st.button("Next Card", type="primary", use_container_width=True):
        advance()
        st.rerun()
