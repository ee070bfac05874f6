"""
Feedback Button UI

Renders rating buttons for self-graded review.
"""

from typing import Optional

import streamlit as st

from deckcore import fsrs

RATING_CHOICES = {
    "❌ Again": fsrs.Rating.AGAIN,
    "😰 Hard": fsrs.Rating.HARD,
    "👍 Good": fsrs.Rating.GOOD,
    "✨ Easy": fsrs.Rating.EASY,
}


def render_feedback_buttons(key_suffix: str = "") -> Optional[fsrs.Rating]:
    """
    Render rating buttons.

    Returns:
        Rating selected by user, or None if nothing selected yet
    """
    st.markdown("**How well did you remember this card?**")

    st.markdown(
        """
        <style>
        .stRadio div[role="radiogroup"] {
            display: grid;
            grid-template-columns: repeat(2, 1fr);
            gap: 0.5rem;
        }
        .stRadio label {
            border: 1px solid #ddd;
            border-radius: 10px;
            padding: 0.55rem 0.6rem;
            text-align: center;
            background: #f9fafb;
        }
        .stRadio input {
            display: none;
        }
        </style>
        """,
        unsafe_allow_html=True
    )

    choice = st.radio(
        "Answer",
        list(RATING_CHOICES),
        index=None,
        key=f"answer_choice_{key_suffix}",
        label_visibility="collapsed"
    )
    if choice is None:
        return None
    return RATING_CHOICES[choice]
