"""
Types returned by the study services.

Plain frozen dataclasses detached from the ORM session, so they can be
cached in Streamlit session state or serialized by the API layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from deckcore.fsrs.constants import Rating, State


@dataclass(frozen=True)
class ScheduleSnapshot:
    """
    Current scheduling state of one card.
    """
    card_id: str
    due_at: datetime
    last_reviewed_at: Optional[datetime]
    interval_minutes: int
    repetitions: int
    ease_factor: float
    fsrs_state: State
    fsrs_stability: float
    fsrs_difficulty: float
    fsrs_elapsed_days: int
    fsrs_scheduled_days: int
    fsrs_learning_steps: int
    fsrs_lapses: int

    @classmethod
    def from_row(cls, row) -> "ScheduleSnapshot":
        return cls(
            card_id=row.card_id,
            due_at=row.due_at,
            last_reviewed_at=row.last_reviewed_at,
            interval_minutes=row.interval_minutes,
            repetitions=row.repetitions,
            ease_factor=row.ease_factor,
            fsrs_state=State.decode(row.fsrs_state),
            fsrs_stability=row.fsrs_stability,
            fsrs_difficulty=row.fsrs_difficulty,
            fsrs_elapsed_days=row.fsrs_elapsed_days,
            fsrs_scheduled_days=row.fsrs_scheduled_days,
            fsrs_learning_steps=row.fsrs_learning_steps,
            fsrs_lapses=row.fsrs_lapses,
        )


@dataclass(frozen=True)
class ReviewRecord:
    """
    One immutable review history entry.
    """
    id: str
    user_id: str
    deck_id: str
    card_id: str
    rating: Rating
    previous_due_at: Optional[datetime]
    scheduled_due_at: datetime
    previous_interval: int
    next_interval: int
    created_at: datetime


@dataclass(frozen=True)
class ReviewOutcome:
    schedule_state: ScheduleSnapshot
    review: ReviewRecord


@dataclass(frozen=True)
class StudyCard:
    id: str
    question: str
    answer: str
    schedule_state: Optional[ScheduleSnapshot]


@dataclass(frozen=True)
class StudySession:
    """
    Cards due now for a deck plus summary counts.

    due_now_count is not capped by the session limit, so it can exceed
    len(cards).
    """
    deck_id: str
    deck_title: str
    due_now_count: int
    next_due_at: Optional[datetime]
    cards: list[StudyCard]


@dataclass(frozen=True)
class GradedReview:
    """
    AI grading result together with the review it produced.
    """
    score: int
    rating: Rating
    feedback: str
    ideal_answer: str
    assistant_reply: str
    outcome: ReviewOutcome
