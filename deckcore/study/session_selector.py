"""
Session Selector - Due-Now Card Selection

Builds a study session for one deck from two pools:
1. Scheduled pool: cards whose ScheduleState is due (due_at <= now),
   soonest-overdue first
2. New pool: cards with no ScheduleState yet, oldest-added first

Session Logic:
- Take up to `limit` cards from the scheduled pool
- Top up from the new pool until `limit` is reached

Read-only: nothing is written.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from deckcore.decks_repo import require_owned_deck
from deckcore.errors import InvalidInputError
from deckcore.fsrs.database import get_session
from deckcore.fsrs.memory_state import ensure_utc
from deckcore.fsrs.models import (
    Card as CardModel,
    ScheduleState as ScheduleStateModel,
)
from deckcore.study.types import ScheduleSnapshot, StudyCard, StudySession

logger = logging.getLogger(__name__)

# ---- Session Configuration ----
DEFAULT_SESSION_LIMIT = 20
MIN_SESSION_LIMIT = 1
MAX_SESSION_LIMIT = 100


def validate_limit(limit: Optional[int]) -> int:
    """
    Resolve the session size.

    Raises:
        InvalidInputError: limit is not an integer in [1, 100]
    """
    if limit is None:
        return DEFAULT_SESSION_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidInputError(f"limit must be an integer, got {limit!r}")
    if not MIN_SESSION_LIMIT <= limit <= MAX_SESSION_LIMIT:
        raise InvalidInputError(
            f"limit must be between {MIN_SESSION_LIMIT} and {MAX_SESSION_LIMIT}, got {limit}"
        )
    return limit


def get_study_session(
    user_id: str,
    deck_id: str,
    limit: Optional[int] = None,
    now: Optional[datetime] = None
) -> StudySession:
    """
    Get the cards of a deck that are due now.

    Args:
        user_id: Owner of the deck
        deck_id: Deck to study
        limit: Maximum cards returned (default 20, must be 1-100)
        now: Reference instant (defaults to current UTC time)

    Returns:
        StudySession with the selected cards, the uncapped due count and
        the next upcoming due instant

    Raises:
        InvalidInputError: limit out of range
        NotFoundError: Deck missing or not owned by the user
    """
    limit = validate_limit(limit)
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)

    session = get_session()
    try:
        deck = require_owned_deck(session, user_id, deck_id)

        scheduled = _scheduled_due_query(session, deck_id, now)
        unscheduled = _never_scheduled_query(session, deck_id)

        scheduled_rows = (
            scheduled.order_by(
                ScheduleStateModel.due_at.asc(),
                CardModel.created_at.asc(),
                CardModel.id.asc(),
            )
            .limit(limit)
            .all()
        )
        new_rows = (
            unscheduled.order_by(CardModel.created_at.asc(), CardModel.id.asc())
            .limit(limit)
            .all()
        )

        cards = fill_in_order(
            {"scheduled": scheduled_rows, "new": new_rows},
            ["scheduled", "new"],
            limit,
        )
        due_now_count = scheduled.count() + unscheduled.count()
        next_due_at = _next_due_at(session, deck_id, now)

        logger.debug(
            "Session for deck %s: %d selected, %d due now",
            deck_id, len(cards), due_now_count
        )
        return StudySession(
            deck_id=deck.id,
            deck_title=deck.title,
            due_now_count=due_now_count,
            next_due_at=next_due_at,
            cards=[_study_card(card) for card in cards],
        )
    finally:
        session.close()


def fill_in_order(
    pools: dict[str, list[CardModel]],
    order: list[str],
    target_size: int
) -> list[CardModel]:
    """
    Fill a session by walking pools in order until target_size is reached.

    A card already taken from an earlier pool is skipped.
    """
    session: list[CardModel] = []
    seen: set[str] = set()
    for name in order:
        for card in pools.get(name, []):
            if len(session) >= target_size:
                return session
            if card.id in seen:
                continue
            seen.add(card.id)
            session.append(card)
    return session


def _scheduled_due_query(session: Session, deck_id: str, now: datetime):
    return (
        session.query(CardModel)
        .join(ScheduleStateModel, ScheduleStateModel.card_id == CardModel.id)
        .filter(CardModel.deck_id == deck_id, ScheduleStateModel.due_at <= now)
    )


def _never_scheduled_query(session: Session, deck_id: str):
    return (
        session.query(CardModel)
        .outerjoin(ScheduleStateModel, ScheduleStateModel.card_id == CardModel.id)
        .filter(CardModel.deck_id == deck_id, ScheduleStateModel.id.is_(None))
    )


def _next_due_at(session: Session, deck_id: str, now: datetime) -> Optional[datetime]:
    row = (
        session.query(ScheduleStateModel.due_at)
        .join(CardModel, ScheduleStateModel.card_id == CardModel.id)
        .filter(CardModel.deck_id == deck_id, ScheduleStateModel.due_at > now)
        .order_by(ScheduleStateModel.due_at.asc())
        .first()
    )
    return row[0] if row else None


def _study_card(card: CardModel) -> StudyCard:
    schedule = card.schedule_state
    return StudyCard(
        id=card.id,
        question=card.question,
        answer=card.answer,
        schedule_state=ScheduleSnapshot.from_row(schedule) if schedule else None,
    )
