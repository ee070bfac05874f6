"""
SQLAlchemy ORM Models for the Study Database

Defines Deck, Card, ScheduleState and Review models.

Deck and Card belong to the deck store; ScheduleState and Review are
written only by the review applier. Timestamps are stored as naive UTC and
returned timezone-aware, so SQLite and Postgres compare them the same way.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """DateTime column that always round-trips timezone-aware UTC values."""
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def generate_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Deck(Base):
    """
    A named collection of cards owned by one user.
    """
    __tablename__ = 'decks'

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(255), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    cards = relationship(
        "Card",
        back_populates="deck",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Deck({self.id}, {self.title!r}, user={self.user_id})>"


class Card(Base):
    """
    A question/answer pair inside a deck.
    """
    __tablename__ = 'cards'
    __table_args__ = (
        Index('ix_cards_deck_created', 'deck_id', 'created_at'),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    deck_id = Column(String(36), ForeignKey('decks.id', ondelete='CASCADE'), nullable=False)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    deck = relationship("Deck", back_populates="cards")
    schedule_state = relationship(
        "ScheduleState",
        back_populates="card",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Card({self.id}, deck={self.deck_id})>"


class ScheduleState(Base):
    """
    Persistent scheduling state for a single card (one-to-one, created lazily).

    Rows written before full model storage have zero fsrs_stability or
    fsrs_difficulty and are reconstructed by the legacy adapter.
    """
    __tablename__ = 'schedule_states'

    id = Column(String(36), primary_key=True, default=generate_id)
    card_id = Column(
        String(36),
        ForeignKey('cards.id', ondelete='CASCADE'),
        nullable=False,
        unique=True,
    )

    # Scheduling
    due_at = Column(UTCDateTime, nullable=False, index=True)
    last_reviewed_at = Column(UTCDateTime, nullable=True)
    interval_minutes = Column(Integer, nullable=False, default=0)
    repetitions = Column(Integer, nullable=False, default=0)
    ease_factor = Column(Float, nullable=False, default=2.5)  # Display only

    # Memory model state
    fsrs_state = Column(Integer, nullable=False, default=0)  # 0=New, 1=Learning, 2=Review, 3=Relearning
    fsrs_stability = Column(Float, nullable=False, default=0.0)
    fsrs_difficulty = Column(Float, nullable=False, default=0.0)
    fsrs_elapsed_days = Column(Integer, nullable=False, default=0)
    fsrs_scheduled_days = Column(Integer, nullable=False, default=0)
    fsrs_learning_steps = Column(Integer, nullable=False, default=0)
    fsrs_lapses = Column(Integer, nullable=False, default=0)

    # Optimistic concurrency: bumped on every review
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now)

    card = relationship("Card", back_populates="schedule_state")

    def __repr__(self):
        return f"<ScheduleState({self.card_id}, due={self.due_at}, state={self.fsrs_state})>"


class Review(Base):
    """
    Append-only log entry for a single review of a card.

    Captures the due date and interval before and after the review.
    """
    __tablename__ = 'reviews'
    __table_args__ = (
        Index('ix_reviews_user_created', 'user_id', 'created_at'),
        Index('ix_reviews_deck_created', 'deck_id', 'created_at'),
        Index('ix_reviews_card_created', 'card_id', 'created_at'),
    )

    id = Column(String(36), primary_key=True, default=generate_id)

    # User scope and card identifiers (denormalized for history scans)
    user_id = Column(String(255), nullable=False)
    deck_id = Column(String(36), ForeignKey('decks.id', ondelete='CASCADE'), nullable=False)
    card_id = Column(String(36), ForeignKey('cards.id', ondelete='CASCADE'), nullable=False)

    rating = Column(String(10), nullable=False)  # AGAIN, HARD, GOOD, EASY

    previous_due_at = Column(UTCDateTime, nullable=True)  # Null on first review
    scheduled_due_at = Column(UTCDateTime, nullable=False)
    previous_interval = Column(Integer, nullable=False, default=0)
    next_interval = Column(Integer, nullable=False)

    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    def __repr__(self):
        return f"<Review(id={self.id}, card={self.card_id}, rating={self.rating})>"
