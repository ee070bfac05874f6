"""AI grading collaborator."""

from deckcore.grading.provider import (
    MockGrader,
    OpenAIGrader,
    StudyGrader,
    get_grader,
)
from deckcore.grading.schemas import ChatMessage, GradeResult, chat_history

__all__ = [
    "ChatMessage",
    "GradeResult",
    "MockGrader",
    "OpenAIGrader",
    "StudyGrader",
    "chat_history",
    "get_grader",
]
