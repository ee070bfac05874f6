"""
Review Applier

Applies one review event end-to-end:
1. Reconstruct the card's memory state (legacy adapter)
2. Run the scheduler for the given rating
3. Derive the interval in minutes and the display ease factor
4. Upsert the ScheduleState row and insert one Review row

Steps 4a and 4b run in the caller's transaction and are committed
together or not at all.

Concurrent reviews of the same card are detected with a version column:
the update only applies if the row is unchanged since it was read,
otherwise ConflictError is raised and nothing is written.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from deckcore.decks_repo import require_owned_card
from deckcore.errors import ConflictError, InvalidInputError
from deckcore.fsrs import legacy, scheduler
from deckcore.fsrs.constants import Rating
from deckcore.fsrs.database import session_scope
from deckcore.fsrs.memory_state import (
    ease_factor_from_difficulty,
    ensure_utc,
    interval_minutes_between,
)
from deckcore.fsrs.models import (
    Review as ReviewModel,
    ScheduleState as ScheduleStateModel,
)
from deckcore.study.types import ReviewOutcome, ReviewRecord, ScheduleSnapshot

logger = logging.getLogger(__name__)


def coerce_rating(rating: Union[Rating, str]) -> Rating:
    """
    Accept a Rating or one of the literal strings AGAIN/HARD/GOOD/EASY.

    Raises:
        InvalidInputError: Anything else
    """
    if isinstance(rating, Rating):
        return rating
    try:
        return Rating.parse(rating)
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from exc


def submit_review(
    user_id: str,
    card_id: str,
    rating: Union[Rating, str],
    now: Optional[datetime] = None
) -> ReviewOutcome:
    """
    Review a card the user owns, in its own transaction.

    Args:
        user_id: Reviewing user
        card_id: Card being reviewed
        rating: AGAIN, HARD, GOOD or EASY
        now: Review instant (defaults to current UTC time)

    Returns:
        ReviewOutcome with the new schedule state and the review record

    Raises:
        InvalidInputError: Unknown rating
        NotFoundError: Card missing or not owned by the user
        ConflictError: Card reviewed concurrently
        PersistenceError: Database failure (nothing written)
    """
    rating = coerce_rating(rating)
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)

    with session_scope() as session:
        card = require_owned_card(session, user_id, card_id)
        outcome = apply_review(
            session,
            card_id=card.id,
            deck_id=card.deck_id,
            user_id=user_id,
            schedule_state=card.schedule_state,
            rating=rating,
            now=now,
        )

    logger.info(
        "Reviewed card %s as %s: interval %s -> %s min",
        card_id,
        rating.name,
        outcome.review.previous_interval,
        outcome.review.next_interval,
    )
    return outcome


def apply_review(
    session: Session,
    *,
    card_id: str,
    deck_id: str,
    user_id: str,
    schedule_state: Optional[ScheduleStateModel],
    rating: Rating,
    now: datetime
) -> ReviewOutcome:
    """
    Schedule one review and stage both writes in the given session.

    Ownership must already have been checked by the caller.

    Args:
        session: Open session; the caller commits
        card_id: Card being reviewed
        deck_id: Card's deck (denormalized onto the review)
        user_id: Reviewing user
        schedule_state: Current ScheduleState row, or None if never reviewed
        rating: Rating to apply
        now: Review instant

    Returns:
        ReviewOutcome describing the staged rows
    """
    now = ensure_utc(now)
    rating = Rating(rating)

    memory = legacy.reconstruct_memory_state(schedule_state, now)
    next_memory = scheduler.process_review(memory, rating, now)

    next_interval = interval_minutes_between(now, next_memory.due)
    values = {
        "due_at": next_memory.due,
        "last_reviewed_at": now,
        "interval_minutes": next_interval,
        "repetitions": next_memory.reps,
        "ease_factor": ease_factor_from_difficulty(next_memory.difficulty),
        "fsrs_state": int(next_memory.state),
        "fsrs_stability": next_memory.stability,
        "fsrs_difficulty": next_memory.difficulty,
        "fsrs_elapsed_days": next_memory.elapsed_days,
        "fsrs_scheduled_days": next_memory.scheduled_days,
        "fsrs_learning_steps": next_memory.learning_steps,
        "fsrs_lapses": next_memory.lapses,
    }

    previous_due_at = schedule_state.due_at if schedule_state is not None else None
    previous_interval = schedule_state.interval_minutes if schedule_state is not None else 0

    _upsert_schedule_state(session, card_id, schedule_state, values, now)

    review = ReviewModel(
        user_id=user_id,
        deck_id=deck_id,
        card_id=card_id,
        rating=rating.name,
        previous_due_at=previous_due_at,
        scheduled_due_at=next_memory.due,
        previous_interval=previous_interval,
        next_interval=next_interval,
        created_at=now,
    )
    session.add(review)
    session.flush()

    snapshot = ScheduleSnapshot(
        card_id=card_id,
        due_at=values["due_at"],
        last_reviewed_at=now,
        interval_minutes=next_interval,
        repetitions=values["repetitions"],
        ease_factor=values["ease_factor"],
        fsrs_state=next_memory.state,
        fsrs_stability=next_memory.stability,
        fsrs_difficulty=next_memory.difficulty,
        fsrs_elapsed_days=next_memory.elapsed_days,
        fsrs_scheduled_days=next_memory.scheduled_days,
        fsrs_learning_steps=next_memory.learning_steps,
        fsrs_lapses=next_memory.lapses,
    )
    record = ReviewRecord(
        id=review.id,
        user_id=user_id,
        deck_id=deck_id,
        card_id=card_id,
        rating=rating,
        previous_due_at=previous_due_at,
        scheduled_due_at=next_memory.due,
        previous_interval=previous_interval,
        next_interval=next_interval,
        created_at=now,
    )
    return ReviewOutcome(schedule_state=snapshot, review=record)


def _upsert_schedule_state(
    session: Session,
    card_id: str,
    current: Optional[ScheduleStateModel],
    values: dict,
    now: datetime
) -> None:
    if current is None:
        session.add(
            ScheduleStateModel(
                card_id=card_id,
                version=1,
                created_at=now,
                updated_at=now,
                **values,
            )
        )
        try:
            session.flush()
        except IntegrityError as exc:
            # Another review created the row first
            raise ConflictError(card_id) from exc
        return

    updated = (
        session.query(ScheduleStateModel)
        .filter(
            ScheduleStateModel.card_id == card_id,
            ScheduleStateModel.version == current.version,
        )
        .update(
            {**values, "version": current.version + 1, "updated_at": now},
            synchronize_session=False,
        )
    )
    if updated != 1:
        raise ConflictError(card_id)
    session.expire(current)
