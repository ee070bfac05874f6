"""
Grading Bridge - AI-graded study mode

Turns a free-text answer into a rating and applies it through the same
submit_review path as a self-graded review. There is no separate schedule
for AI-graded cards.

Score thresholds:
    score < 40  -> AGAIN
    score < 60  -> HARD
    score < 85  -> GOOD
    otherwise   -> EASY
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from deckcore.decks_repo import require_owned_card
from deckcore.errors import GradingError
from deckcore.fsrs.constants import Rating
from deckcore.fsrs.database import get_session
from deckcore.grading import ChatMessage, StudyGrader, get_grader
from deckcore.study.review_applier import submit_review
from deckcore.study.types import GradedReview

logger = logging.getLogger(__name__)

AGAIN_BELOW = 40
HARD_BELOW = 60
GOOD_BELOW = 85


def score_to_rating(score: int) -> Rating:
    """
    Map a 0-100 correctness score to a rating.

    Raises:
        GradingError: score is not an integer in [0, 100]
    """
    if isinstance(score, bool) or not isinstance(score, int) or not 0 <= score <= 100:
        raise GradingError(f"Score out of range: {score!r}")
    if score < AGAIN_BELOW:
        return Rating.AGAIN
    if score < HARD_BELOW:
        return Rating.HARD
    if score < GOOD_BELOW:
        return Rating.GOOD
    return Rating.EASY


def _card_text(user_id: str, card_id: str) -> tuple[str, str]:
    session = get_session()
    try:
        card = require_owned_card(session, user_id, card_id)
        return card.question, card.answer
    finally:
        session.close()


def grade_and_review(
    user_id: str,
    card_id: str,
    user_answer: str,
    history: Sequence[ChatMessage] = (),
    now: Optional[datetime] = None,
    grader: Optional[StudyGrader] = None
) -> GradedReview:
    """
    Grade a free-text answer and schedule the card from the score.

    Grading happens before any write: if it fails, the card's schedule
    is left untouched.

    Args:
        user_id: Reviewing user
        card_id: Card being answered
        user_answer: Learner's free-text answer
        history: Prior conversation about this card
        now: Review instant (defaults to current UTC time)
        grader: Grader to use (defaults to get_grader())

    Returns:
        GradedReview with the grading result and the applied review

    Raises:
        NotFoundError: Card missing or not owned by the user
        GradingError: Grader failed or returned unusable output
    """
    question, expected_answer = _card_text(user_id, card_id)
    grader = grader or get_grader()

    result = grader.grade_answer(question, expected_answer, user_answer, history)
    rating = score_to_rating(result.score)
    logger.debug("Card %s graded %d -> %s", card_id, result.score, rating.name)

    outcome = submit_review(user_id, card_id, rating, now=now)
    return GradedReview(
        score=result.score,
        rating=rating,
        feedback=result.feedback,
        ideal_answer=result.ideal_answer,
        assistant_reply=result.assistant_reply,
        outcome=outcome,
    )


def follow_up(
    user_id: str,
    card_id: str,
    message: str,
    history: Sequence[ChatMessage] = (),
    user_answer: Optional[str] = None,
    feedback: Optional[str] = None,
    ideal_answer: Optional[str] = None,
    grader: Optional[StudyGrader] = None
) -> str:
    """
    Answer a follow-up question about a card. Never schedules.
    """
    question, expected_answer = _card_text(user_id, card_id)
    grader = grader or get_grader()
    return grader.follow_up(
        question,
        expected_answer,
        message,
        history=history,
        user_answer=user_answer,
        feedback=feedback,
        ideal_answer=ideal_answer,
    )
