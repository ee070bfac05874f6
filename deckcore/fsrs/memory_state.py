"""
Memory State - FSRS Card State and Retrievability

Defines the memory state carried between reviews and the derived
quantities computed from it.

Key concepts:
- Stability (S): Days until retrievability decays to 90%
- Difficulty (D): How hard the card is to learn (1-10 scale)
- Retrievability (R): Probability of successful recall at time t,
  following the power forgetting curve R = (1 + FACTOR * t / S) ^ DECAY
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import math

from deckcore.fsrs.constants import (
    DEFAULT_WEIGHTS,
    MAXIMUM_INTERVAL,
    MIN_EASE_FACTOR,
    MIN_INTERVAL_MINUTES,
    REQUEST_RETENTION,
    State,
)


DECAY = -DEFAULT_WEIGHTS[20]
FACTOR = 0.9 ** (1 / DECAY) - 1


@dataclass
class MemoryState:
    """
    Memory state for a single card as of its last review.

    A never-reviewed card is in State.NEW with zero stability and difficulty.
    """
    due: datetime
    stability: float = 0.0
    difficulty: float = 0.0

    # Model bookkeeping
    elapsed_days: int = 0      # Calendar days between the last two reviews
    scheduled_days: int = 0    # Days from last review to due (0 while on a step)
    learning_steps: int = 0    # Position on the (re)learning step ladder

    # Counters
    reps: int = 0
    lapses: int = 0

    state: State = State.NEW
    last_review: Optional[datetime] = None


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def new_card(now: datetime) -> MemoryState:
    """
    Initialize state for a card that has never been reviewed.

    Args:
        now: Instant the card becomes available (also its due date)

    Returns:
        New MemoryState in State.NEW
    """
    return MemoryState(due=ensure_utc(now))


def calculate_retrievability(stability: float, elapsed_days: float) -> float:
    """
    Calculate retrievability on the power forgetting curve.

    Formula: R = (1 + FACTOR * t / S) ^ DECAY

    Where FACTOR is chosen so that R = 0.9 when t = S.

    Args:
        stability: Current stability in days
        elapsed_days: Time since last review in days

    Returns:
        Retrievability between 0 and 1
    """
    if stability <= 0:
        return 0.0
    if elapsed_days <= 0:
        return 1.0
    return (1 + FACTOR * elapsed_days / stability) ** DECAY


def days_between(last_review: Optional[datetime], now: datetime) -> int:
    """
    Count UTC calendar days between two instants.

    Reviews on the same calendar day count as 0 elapsed days, which is
    what selects the same-day stability update.
    """
    if last_review is None:
        return 0
    delta = ensure_utc(now).date() - ensure_utc(last_review).date()
    return max(0, delta.days)


def next_interval_days(stability: float) -> int:
    """
    Interval in whole days at which retrievability hits REQUEST_RETENTION.

    Clamped to [1, MAXIMUM_INTERVAL].
    """
    interval = stability / FACTOR * (REQUEST_RETENTION ** (1 / DECAY) - 1)
    return min(max(round_half_up(interval), 1), MAXIMUM_INTERVAL)


def interval_minutes_between(start: datetime, end: datetime) -> int:
    """Minutes from start to end, rounded, never less than one."""
    seconds = (ensure_utc(end) - ensure_utc(start)).total_seconds()
    return max(MIN_INTERVAL_MINUTES, round_half_up(seconds / 60))


def ease_factor_from_difficulty(difficulty: float) -> float:
    """
    Legacy ease factor shown in the UI and analytics.

    Not used by the scheduler; maps difficulty 1..10 onto 2.5..1.3.
    """
    ease = round_half_up(((11 - difficulty) / 4) * 1000) / 1000
    return max(MIN_EASE_FACTOR, ease)


def due_after(now: datetime, minutes: int = 0, days: int = 0) -> datetime:
    return ensure_utc(now) + timedelta(minutes=minutes, days=days)
