"""
Study services: session selection, review application and AI grading.

Quick start:
    from deckcore.study import get_study_session, submit_review

    session = get_study_session(user_id, deck_id, limit=20)
    outcome = submit_review(user_id, session.cards[0].id, "GOOD")
"""

from deckcore.study.grading_bridge import follow_up, grade_and_review, score_to_rating
from deckcore.study.review_applier import apply_review, submit_review
from deckcore.study.session_selector import get_study_session
from deckcore.study.types import (
    GradedReview,
    ReviewOutcome,
    ReviewRecord,
    ScheduleSnapshot,
    StudyCard,
    StudySession,
)

__all__ = [
    "apply_review",
    "submit_review",
    "get_study_session",
    "grade_and_review",
    "follow_up",
    "score_to_rating",
    "GradedReview",
    "ReviewOutcome",
    "ReviewRecord",
    "ScheduleSnapshot",
    "StudyCard",
    "StudySession",
]
