"""
Legacy and Partial State Adapter

Turns whatever is stored for a card into a MemoryState the scheduler can use.

A stored schedule is decoded once into one of three shapes:
- Uninitialized: no ScheduleState row yet (never reviewed)
- LegacyPartial: a row written before full model storage, carrying only
  repetitions, interval and dates
- FullModelState: a row with positive stability and difficulty, used as-is

Known-lossy path: legacy rows never recorded lapses, so reconstructed
states start with lapses = 0. The real count cannot be recovered.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from deckcore.fsrs.constants import (
    LEGACY_DIFFICULTY,
    LEGACY_MIN_STABILITY,
    MINUTES_PER_DAY,
    State,
)
from deckcore.fsrs.memory_state import MemoryState, ensure_utc, new_card, round_half_up


@dataclass(frozen=True)
class Uninitialized:
    """No schedule has been stored for the card."""


@dataclass(frozen=True)
class LegacyPartial:
    """Schedule row without memory model fields."""
    repetitions: int
    interval_minutes: int
    due_at: datetime
    last_reviewed_at: Optional[datetime]


@dataclass(frozen=True)
class FullModelState:
    """Schedule row holding complete memory model state."""
    memory: MemoryState


StoredSchedule = Union[Uninitialized, LegacyPartial, FullModelState]


def decode_schedule_row(row) -> StoredSchedule:
    """
    Classify a ScheduleState row (or None).

    Args:
        row: ORM ScheduleState, any object with the same attributes, or None

    Returns:
        Uninitialized, LegacyPartial or FullModelState
    """
    if row is None:
        return Uninitialized()

    stability = row.fsrs_stability or 0.0
    difficulty = row.fsrs_difficulty or 0.0
    last_reviewed_at = ensure_utc(row.last_reviewed_at) if row.last_reviewed_at else None

    if stability > 0 and difficulty > 0:
        return FullModelState(
            memory=MemoryState(
                due=ensure_utc(row.due_at),
                stability=stability,
                difficulty=difficulty,
                elapsed_days=row.fsrs_elapsed_days or 0,
                scheduled_days=row.fsrs_scheduled_days or 0,
                learning_steps=row.fsrs_learning_steps or 0,
                reps=row.repetitions or 0,
                lapses=row.fsrs_lapses or 0,
                state=State.decode(row.fsrs_state),
                last_review=last_reviewed_at,
            )
        )

    return LegacyPartial(
        repetitions=row.repetitions or 0,
        interval_minutes=row.interval_minutes or 0,
        due_at=ensure_utc(row.due_at),
        last_reviewed_at=last_reviewed_at,
    )


def to_memory_state(stored: StoredSchedule, now: datetime) -> MemoryState:
    """
    Produce a usable MemoryState from a decoded schedule.

    Args:
        stored: Result of decode_schedule_row
        now: Current instant (anchors the state of a never-reviewed card)

    Returns:
        MemoryState ready for the scheduler
    """
    if isinstance(stored, FullModelState):
        return stored.memory

    if isinstance(stored, LegacyPartial):
        scheduled_days = round_half_up(stored.interval_minutes / MINUTES_PER_DAY)
        return MemoryState(
            due=stored.due_at,
            stability=max(LEGACY_MIN_STABILITY, float(scheduled_days)),
            difficulty=LEGACY_DIFFICULTY,
            elapsed_days=0,
            scheduled_days=scheduled_days,
            learning_steps=0,
            reps=stored.repetitions,
            lapses=0,  # not recorded by legacy rows
            state=State.REVIEW if stored.repetitions > 0 else State.NEW,
            last_review=stored.last_reviewed_at,
        )

    return new_card(now)


def reconstruct_memory_state(row, now: datetime) -> MemoryState:
    """Decode a stored ScheduleState row (or None) straight into a MemoryState."""
    return to_memory_state(decode_schedule_row(row), now)
