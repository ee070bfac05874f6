"""UI Components for the study app"""

from deckapp.ui.flashcard import BACK_BG_COLOR, FRONT_BG_COLOR, render_flashcard
from deckapp.ui.session_stats import render_session_stats, render_session_complete
from deckapp.ui.feedback_buttons import render_feedback_buttons

__all__ = [
    "BACK_BG_COLOR",
    "FRONT_BG_COLOR",
    "render_flashcard",
    "render_session_stats",
    "render_session_complete",
    "render_feedback_buttons",
]
