"""
Deck and card repository.

Ownership-checked access to decks and cards. The find_* / require_*
functions take an open session so they can run inside a caller's
transaction; the remaining functions manage their own session.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from deckcore.errors import InvalidInputError, NotFoundError
from deckcore.fsrs.database import get_session, session_scope
from deckcore.fsrs.models import (
    Card as CardModel,
    Deck as DeckModel,
    ScheduleState as ScheduleStateModel,
)

logger = logging.getLogger(__name__)


# ---- Ownership Checks ----

def find_owned_deck(session: Session, user_id: str, deck_id: str) -> Optional[DeckModel]:
    """
    Get a deck if it exists and belongs to the user.

    Returns:
        Deck row, or None if not found or not owned
    """
    return session.query(DeckModel).filter(
        DeckModel.id == deck_id,
        DeckModel.user_id == user_id
    ).one_or_none()


def find_owned_card(session: Session, user_id: str, card_id: str) -> Optional[CardModel]:
    """
    Get a card if it exists and its deck belongs to the user.

    The card's schedule_state relationship is None for never-reviewed cards.

    Returns:
        Card row, or None if not found or not owned
    """
    return (
        session.query(CardModel)
        .join(DeckModel, CardModel.deck_id == DeckModel.id)
        .filter(CardModel.id == card_id, DeckModel.user_id == user_id)
        .one_or_none()
    )


def require_owned_deck(session: Session, user_id: str, deck_id: str) -> DeckModel:
    deck = find_owned_deck(session, user_id, deck_id)
    if deck is None:
        raise NotFoundError("Deck", deck_id)
    return deck


def require_owned_card(session: Session, user_id: str, card_id: str) -> CardModel:
    card = find_owned_card(session, user_id, card_id)
    if card is None:
        raise NotFoundError("Card", card_id)
    return card


# ---- Deck and Card Management ----

def _require_text(value: str, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInputError(f"{field} must not be empty")
    return text


def create_deck(user_id: str, title: str) -> dict:
    """
    Create a new empty deck.

    Args:
        user_id: Owner
        title: Deck title (non-empty)

    Returns:
        Deck dictionary
    """
    title = _require_text(title, "title")
    with session_scope() as session:
        deck = DeckModel(user_id=user_id, title=title)
        session.add(deck)
        session.flush()
        logger.info("Created deck %s for user %s", deck.id, user_id)
        return _deck_dict(deck, card_count=0)


def add_card(
    user_id: str,
    deck_id: str,
    question: str,
    answer: str,
    created_at: Optional[datetime] = None
) -> dict:
    """
    Add a card to a deck the user owns.

    Args:
        user_id: Owner of the deck
        deck_id: Target deck
        question: Front of the card
        answer: Back of the card
        created_at: Creation time (defaults to now)

    Returns:
        Card dictionary
    """
    question = _require_text(question, "question")
    answer = _require_text(answer, "answer")
    with session_scope() as session:
        require_owned_deck(session, user_id, deck_id)
        card = CardModel(deck_id=deck_id, question=question, answer=answer)
        if created_at is not None:
            card.created_at = created_at
        session.add(card)
        session.flush()
        return _card_dict(card)


def delete_card(user_id: str, card_id: str) -> None:
    """Delete a card; its schedule state and reviews go with it."""
    with session_scope() as session:
        card = require_owned_card(session, user_id, card_id)
        session.delete(card)


def list_decks(user_id: str) -> list[dict]:
    """
    Get all decks owned by the user, oldest first, with card counts.
    """
    session = get_session()
    try:
        rows = (
            session.query(DeckModel, func.count(CardModel.id))
            .outerjoin(CardModel, CardModel.deck_id == DeckModel.id)
            .filter(DeckModel.user_id == user_id)
            .group_by(DeckModel.id)
            .order_by(DeckModel.created_at.asc())
            .all()
        )
        return [_deck_dict(deck, card_count=count) for deck, count in rows]
    finally:
        session.close()


def list_cards(user_id: str, deck_id: str) -> list[dict]:
    """
    Get all cards in a deck with their schedule columns.

    Raises:
        NotFoundError: Deck missing or not owned
    """
    session = get_session()
    try:
        require_owned_deck(session, user_id, deck_id)
        rows = (
            session.query(CardModel, ScheduleStateModel)
            .outerjoin(ScheduleStateModel, ScheduleStateModel.card_id == CardModel.id)
            .filter(CardModel.deck_id == deck_id)
            .order_by(CardModel.created_at.asc(), CardModel.id.asc())
            .all()
        )
        cards = []
        for card, schedule in rows:
            entry = _card_dict(card)
            entry["due_at"] = schedule.due_at if schedule else None
            entry["interval_minutes"] = schedule.interval_minutes if schedule else None
            entry["repetitions"] = schedule.repetitions if schedule else 0
            entry["ease_factor"] = schedule.ease_factor if schedule else None
            cards.append(entry)
        return cards
    finally:
        session.close()


# ---- Serialization ----

def _deck_dict(deck: DeckModel, card_count: int) -> dict:
    return {
        "id": deck.id,
        "user_id": deck.user_id,
        "title": deck.title,
        "created_at": deck.created_at,
        "card_count": int(card_count),
    }


def _card_dict(card: CardModel) -> dict:
    return {
        "id": card.id,
        "deck_id": card.deck_id,
        "question": card.question,
        "answer": card.answer,
        "created_at": card.created_at,
    }
