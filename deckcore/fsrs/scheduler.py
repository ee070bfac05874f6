"""
Scheduler - FSRS Algorithm Logic

Pure FSRS scheduling and state updates (no database calls).

Main workflow:
1. Reconstruct memory state (caller's responsibility, see legacy module)
2. Compute elapsed calendar days and retrievability
3. Update difficulty and stability for every rating
4. Place each outcome on the learning-step ladder or graduate it
5. Spread graduated intervals so harder ratings are never due later

All four outcomes are computed together so that the interval ordering
AGAIN <= HARD < GOOD < EASY can be enforced. No randomness is applied:
identical inputs always give identical outputs.

This module handles ONLY the algorithm logic.
Database I/O is handled by the database module.
"""

from __future__ import annotations
from dataclasses import replace
from datetime import datetime

from deckcore.fsrs import learning_steps, stability_updates
from deckcore.fsrs.constants import MINUTES_PER_DAY, Rating, State
from deckcore.fsrs.memory_state import (
    MemoryState,
    calculate_retrievability,
    days_between,
    due_after,
    ensure_utc,
    next_interval_days,
)


def process_review(card: MemoryState, rating: Rating, now: datetime) -> MemoryState:
    """
    Apply one review and return the next memory state.

    Caller is responsible for:
    1. Reconstructing the card's current state
    2. Persisting the returned state and the review record

    Args:
        card: Current memory state (State.NEW for a never-reviewed card)
        rating: User rating (AGAIN, HARD, GOOD, EASY)
        now: Review instant

    Returns:
        New MemoryState; the input is not modified
    """
    return preview_ratings(card, now)[Rating(rating)]


def preview_ratings(card: MemoryState, now: datetime) -> dict[Rating, MemoryState]:
    """
    Compute the next memory state for each of the four ratings.

    Useful for showing "due in ..." hints next to rating buttons.
    """
    now = ensure_utc(now)

    if card.state == State.NEW:
        outcomes = {rating: _first_review(card, rating, now) for rating in Rating}
        _place_on_ladder(outcomes, card, now, stay_state=State.LEARNING)
        return outcomes

    elapsed = days_between(card.last_review, now)
    retrievability = calculate_retrievability(card.stability, elapsed)
    outcomes = {
        rating: _repeat_review(card, rating, now, elapsed, retrievability)
        for rating in Rating
    }

    stay_state = State.RELEARNING if card.state == State.REVIEW else card.state
    _place_on_ladder(outcomes, card, now, stay_state=stay_state)
    return outcomes


def _first_review(card: MemoryState, rating: Rating, now: datetime) -> MemoryState:
    return replace(
        card,
        stability=stability_updates.initial_stability(rating),
        difficulty=stability_updates.clamp_difficulty(
            stability_updates.initial_difficulty(rating)
        ),
        elapsed_days=0,
        reps=card.reps + 1,
        last_review=now,
    )


def _repeat_review(
    card: MemoryState,
    rating: Rating,
    now: datetime,
    elapsed: int,
    retrievability: float
) -> MemoryState:
    if elapsed == 0:
        stability = stability_updates.next_short_term_stability(card.stability, rating)
    elif rating == Rating.AGAIN:
        stability = stability_updates.next_forget_stability(
            card.difficulty, card.stability, retrievability
        )
    else:
        stability = stability_updates.next_recall_stability(
            card.difficulty, card.stability, retrievability, rating
        )

    lapses = card.lapses
    if rating == Rating.AGAIN and card.state in (State.REVIEW, State.RELEARNING):
        lapses += 1

    return replace(
        card,
        stability=stability,
        difficulty=stability_updates.next_difficulty(card.difficulty, rating),
        elapsed_days=elapsed,
        reps=card.reps + 1,
        lapses=lapses,
        last_review=now,
    )


def _place_on_ladder(
    outcomes: dict[Rating, MemoryState],
    card: MemoryState,
    now: datetime,
    stay_state: State
) -> None:
    """
    Set state, step and due date on each outcome in place.

    Ratings with a step on the ladder are due after that many minutes;
    the rest graduate to Review with an interval derived from stability.
    """
    ladder = learning_steps.step_outcomes(card.state, card.learning_steps)
    graduated: list[Rating] = []

    for rating, outcome in outcomes.items():
        step = ladder.get(rating)
        if step is None:
            outcome.state = State.REVIEW
            outcome.learning_steps = 0
            outcome.scheduled_days = next_interval_days(outcome.stability)
            graduated.append(rating)
            continue

        minutes, next_step = step
        outcome.learning_steps = next_step
        outcome.due = due_after(now, minutes=minutes)
        if minutes < MINUTES_PER_DAY:
            outcome.state = stay_state
            outcome.scheduled_days = 0
        else:
            outcome.state = State.REVIEW
            outcome.scheduled_days = minutes // MINUTES_PER_DAY

    _spread_intervals(outcomes, graduated)
    for rating in graduated:
        outcomes[rating].due = due_after(now, days=outcomes[rating].scheduled_days)


def _spread_intervals(outcomes: dict[Rating, MemoryState], graduated: list[Rating]) -> None:
    # Each easier graduated rating is due at least one day after the harder one
    previous = None
    for rating in sorted(graduated):
        outcome = outcomes[rating]
        if previous is not None:
            outcome.scheduled_days = max(outcome.scheduled_days, previous + 1)
        previous = outcome.scheduled_days
