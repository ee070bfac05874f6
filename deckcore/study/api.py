"""
Study API - request validation and JSON-shaped responses.

Transport-neutral handlers: each takes the authenticated user id plus a
plain request body or query values, validates it with pydantic and returns
a JSON-serializable dict. Errors are StudyError subclasses; error_payload()
turns one into a status code and body.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from deckcore.errors import InvalidInputError, StudyError
from deckcore.grading.schemas import (
    MAX_ANSWER_LENGTH,
    MAX_HISTORY_MESSAGES,
    MAX_MESSAGE_LENGTH,
    ChatMessage,
)
from deckcore.study import grading_bridge, review_applier, session_selector
from deckcore.study.types import ReviewRecord, ScheduleSnapshot, StudyCard


# ---- Request Models ----

class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class SessionQuery(_Request):
    limit: int = Field(
        session_selector.DEFAULT_SESSION_LIMIT,
        ge=session_selector.MIN_SESSION_LIMIT,
        le=session_selector.MAX_SESSION_LIMIT,
    )


class ReviewRequest(_Request):
    card_id: str = Field(..., alias="cardId", min_length=1, max_length=64)
    rating: Literal["AGAIN", "HARD", "GOOD", "EASY"]


class GradeRequest(_Request):
    card_id: str = Field(..., alias="cardId", min_length=1, max_length=64)
    user_answer: str = Field(..., alias="userAnswer", min_length=1, max_length=MAX_ANSWER_LENGTH)
    history: list[ChatMessage] = Field(default_factory=list, max_length=MAX_HISTORY_MESSAGES)


class FollowUpRequest(_Request):
    card_id: str = Field(..., alias="cardId", min_length=1, max_length=64)
    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)
    history: list[ChatMessage] = Field(default_factory=list, max_length=MAX_HISTORY_MESSAGES)
    user_answer: Optional[str] = Field(None, alias="userAnswer", max_length=MAX_ANSWER_LENGTH)
    feedback: Optional[str] = Field(None, max_length=5000)
    ideal_answer: Optional[str] = Field(None, alias="idealAnswer", max_length=5000)


def _parse(model: type[_Request], data: Optional[dict]):
    try:
        return model.model_validate(data or {})
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise InvalidInputError(f"Invalid request: {details}") from exc


def _require_id(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip() or len(value) > 64:
        raise InvalidInputError(f"Invalid {name}: {value!r}")
    return value.strip()


# ---- Handlers ----

def get_deck_session(
    user_id: str,
    deck_id: str,
    limit: Any = None,
    now: Optional[datetime] = None
) -> dict:
    """
    GET /study/decks/{deckId}/session?limit=N
    """
    deck_id = _require_id(deck_id, "deckId")
    query = _parse(SessionQuery, {} if limit is None else {"limit": limit})
    session = session_selector.get_study_session(user_id, deck_id, limit=query.limit, now=now)
    return {
        "deck": {"id": session.deck_id, "title": session.deck_title},
        "dueNowCount": session.due_now_count,
        "nextDueAt": _iso(session.next_due_at),
        "cards": [card_payload(card) for card in session.cards],
    }


def post_review(user_id: str, body: Optional[dict], now: Optional[datetime] = None) -> dict:
    """
    POST /study/review {cardId, rating}
    """
    request = _parse(ReviewRequest, body)
    outcome = review_applier.submit_review(user_id, request.card_id, request.rating, now=now)
    return {
        "cardId": request.card_id,
        "rating": request.rating,
        "scheduleState": schedule_state_payload(outcome.schedule_state),
        "review": review_payload(outcome.review),
    }


def post_grade(user_id: str, body: Optional[dict], now: Optional[datetime] = None, grader=None) -> dict:
    """
    POST /study/grade {cardId, userAnswer, history?}
    """
    request = _parse(GradeRequest, body)
    graded = grading_bridge.grade_and_review(
        user_id,
        request.card_id,
        request.user_answer,
        history=request.history,
        now=now,
        grader=grader,
    )
    return {
        "cardId": request.card_id,
        "score": graded.score,
        "rating": graded.rating.name,
        "feedback": graded.feedback,
        "idealAnswer": graded.ideal_answer,
        "assistantReply": graded.assistant_reply,
        "scheduleState": schedule_state_payload(graded.outcome.schedule_state),
        "review": review_payload(graded.outcome.review),
    }


def post_follow_up(user_id: str, body: Optional[dict], grader=None) -> dict:
    """
    POST /study/follow-up {cardId, message, history?}
    """
    request = _parse(FollowUpRequest, body)
    reply = grading_bridge.follow_up(
        user_id,
        request.card_id,
        request.message,
        history=request.history,
        user_answer=request.user_answer,
        feedback=request.feedback,
        ideal_answer=request.ideal_answer,
        grader=grader,
    )
    return {"cardId": request.card_id, "assistantReply": reply}


def error_payload(exc: StudyError) -> tuple[int, dict]:
    """Status code and body for a failed request."""
    return exc.http_status, {"error": str(exc)}


# ---- Serialization ----

def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def schedule_state_payload(snapshot: Optional[ScheduleSnapshot]) -> Optional[dict]:
    if snapshot is None:
        return None
    return {
        "cardId": snapshot.card_id,
        "dueAt": _iso(snapshot.due_at),
        "lastReviewedAt": _iso(snapshot.last_reviewed_at),
        "intervalMinutes": snapshot.interval_minutes,
        "repetitions": snapshot.repetitions,
        "easeFactor": snapshot.ease_factor,
        "fsrsState": int(snapshot.fsrs_state),
        "fsrsStability": snapshot.fsrs_stability,
        "fsrsDifficulty": snapshot.fsrs_difficulty,
        "fsrsElapsedDays": snapshot.fsrs_elapsed_days,
        "fsrsScheduledDays": snapshot.fsrs_scheduled_days,
        "fsrsLearningSteps": snapshot.fsrs_learning_steps,
        "fsrsLapses": snapshot.fsrs_lapses,
    }


def review_payload(review: ReviewRecord) -> dict:
    return {
        "id": review.id,
        "userId": review.user_id,
        "deckId": review.deck_id,
        "cardId": review.card_id,
        "rating": review.rating.name,
        "previousDueAt": _iso(review.previous_due_at),
        "scheduledDueAt": _iso(review.scheduled_due_at),
        "previousInterval": review.previous_interval,
        "nextInterval": review.next_interval,
        "createdAt": _iso(review.created_at),
    }


def card_payload(card: StudyCard) -> dict:
    return {
        "id": card.id,
        "question": card.question,
        "answer": card.answer,
        "scheduleState": schedule_state_payload(card.schedule_state),
    }
