"""
Flashcard UI Component

Renders question/answer cards.
"""

from __future__ import annotations

import html

import streamlit as st


# ---- Shared Card Layout ----

CARD_PADDING = "35px 24px"
CARD_MIN_HEIGHT = "210px"
FRONT_BG_COLOR = "#f0f2f6"
BACK_BG_COLOR = "#e8f4f8"
MAIN_FONT_SIZE = "1.8em"
MAIN_COLOR = "#1f1f1f"
SUBTITLE_COLOR = "#666"


def render_flashcard(
    main_text: str,
    subtitle: str = "",
    corner_text: str = "",
    bg_color: str = FRONT_BG_COLOR,
) -> None:
    """
    Render a flashcard.

    Args:
        main_text: Primary text (center, large)
        subtitle: Optional secondary text (below main, smaller)
        corner_text: Optional text in top-right corner
        bg_color: Background color (FRONT_BG_COLOR or BACK_BG_COLOR)
    """
    # Card text is user content
    main_text = html.escape(main_text).replace("\n", "<br>")
    subtitle = html.escape(subtitle)
    corner_text = html.escape(corner_text)

    corner_html = ""
    if corner_text:
        corner_html = (
            '<div style="position: absolute; top: 15px; right: 20px; '
            f'font-size: 0.9em; color: {SUBTITLE_COLOR}; font-style: italic;">{corner_text}</div>'
        )

    main_html = (
        f'<h1 style="font-size: {MAIN_FONT_SIZE}; color: {MAIN_COLOR}; '
        'font-weight: normal; margin: 0; white-space: normal; '
        'text-align: center; line-height: 1.4; max-width: 100%; '
        'overflow-wrap: anywhere; word-break: break-word;">'
        f"{main_text}</h1>"
    )

    subtitle_html = ""
    if subtitle:
        subtitle_html = (
            f'<p style="font-size: 1.1em; color: {SUBTITLE_COLOR}; '
            'font-style: italic; margin: 15px 0 0 0; text-align: center;">'
            f"{subtitle}</p>"
        )

    card_html = (
        f'<div style="background-color: {bg_color}; padding: {CARD_PADDING}; '
        'border-radius: 15px; text-align: center; box-shadow: 0 4px 6px '
        f'rgba(0, 0, 0, 0.1); min-height: {CARD_MIN_HEIGHT}; display: flex; '
        'flex-direction: column; align-items: center; justify-content: center; '
        f'position: relative;">{corner_html}{main_html}{subtitle_html}</div>'
    )

    st.markdown(card_html, unsafe_allow_html=True)
