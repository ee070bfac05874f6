"""
Session lifecycle helpers for Streamlit app.
"""

from __future__ import annotations

import logging
from typing import Optional

import streamlit as st

from deckapp.state import reset_study_state
from deckcore import fsrs
from deckcore.errors import StudyError
from deckcore.grading import chat_history
from deckcore.study import (
    StudyCard,
    follow_up,
    get_study_session,
    grade_and_review,
    submit_review,
)

logger = logging.getLogger(__name__)


def start_new_session(deck_id: str, mode: str) -> None:
    """
    Fetch the due-now cards for a deck and start studying them.

    Args:
        deck_id: Deck to study
        mode: "self" (reveal and rate) or "ai" (free-text answer graded by AI)
    """
    reset_study_state()
    try:
        session = get_study_session(
            st.session_state.user_id,
            deck_id,
            limit=st.session_state.session_limit,
        )
    except StudyError as exc:
        st.error(str(exc))
        return

    st.session_state.deck_id = deck_id
    st.session_state.study_mode = mode
    st.session_state.session_cards = session.cards
    st.session_state.due_now_count = session.due_now_count
    st.session_state.next_due_at = session.next_due_at


def current_card() -> Optional[StudyCard]:
    cards = st.session_state.session_cards
    position = st.session_state.session_position
    if position >= len(cards):
        return None
    return cards[position]


def advance() -> None:
    """Move to the next card in the session."""
    st.session_state.session_position += 1
    st.session_state.show_answer = False
    st.session_state.grading_result = None
    st.session_state.chat_history = []
    if current_card() is None:
        _refresh_due_summary()


def process_rating(rating: fsrs.Rating) -> None:
    """
    Apply a self-graded rating to the current card and move on.
    """
    card = current_card()
    if card is None:
        return
    try:
        submit_review(st.session_state.user_id, card.id, rating)
    except StudyError as exc:
        st.error(str(exc))
        return

    _record_result(rating)
    advance()
    st.rerun()


def process_answer(user_answer: str) -> bool:
    """
    Grade a free-text answer for the current card; the card is scheduled
    from the score. Grading failures leave the card unscheduled.

    Returns:
        True if the answer was graded
    """
    card = current_card()
    if card is None:
        return False
    try:
        graded = grade_and_review(st.session_state.user_id, card.id, user_answer)
    except StudyError as exc:
        logger.warning("AI grading failed for card %s: %s", card.id, exc)
        st.error(f"Grading failed: {exc}")
        return False

    _record_result(graded.rating)
    st.session_state.grading_result = {
        "user_answer": user_answer,
        "score": graded.score,
        "rating": graded.rating.name,
        "feedback": graded.feedback,
        "ideal_answer": graded.ideal_answer,
        "due_at": graded.outcome.schedule_state.due_at,
    }
    st.session_state.chat_history = [
        {"role": "user", "content": user_answer},
        {"role": "assistant", "content": graded.assistant_reply},
    ]
    return True


def ask_follow_up(message: str) -> bool:
    """Send a follow-up question about the current card to the tutor."""
    card = current_card()
    result = st.session_state.grading_result
    if card is None or result is None:
        return False
    history = chat_history(st.session_state.chat_history)
    try:
        reply = follow_up(
            st.session_state.user_id,
            card.id,
            message,
            history=history,
            user_answer=result["user_answer"],
            feedback=result["feedback"],
            ideal_answer=result["ideal_answer"],
        )
    except StudyError as exc:
        st.error(f"Follow-up failed: {exc}")
        return False

    st.session_state.chat_history.append({"role": "user", "content": message})
    st.session_state.chat_history.append({"role": "assistant", "content": reply})
    return True


def end_session() -> None:
    """End the current session."""
    reset_study_state()


def _record_result(rating: fsrs.Rating) -> None:
    st.session_state.session_count += 1
    if rating != fsrs.Rating.AGAIN:
        st.session_state.session_correct += 1


def _refresh_due_summary() -> None:
    if st.session_state.deck_id is None:
        return
    try:
        session = get_study_session(st.session_state.user_id, st.session_state.deck_id, limit=1)
    except StudyError:
        logger.warning("Could not refresh due summary", exc_info=True)
        return
    st.session_state.due_now_count = session.due_now_count
    st.session_state.next_due_at = session.next_due_at
