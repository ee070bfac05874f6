"""
Learning Steps

Minute-level scheduling for cards that are New, Learning or Relearning,
and for the first failure of a Review card.

A card climbs a fixed ladder of steps (LEARNING_STEPS for new material,
RELEARNING_STEPS after a lapse). Ratings that have no step on the ladder
graduate the card to Review, where intervals come from stability instead.
"""

from __future__ import annotations

from deckcore.fsrs.constants import (
    HARD_SINGLE_STEP_MULTIPLIER,
    LEARNING_STEPS,
    RELEARNING_STEPS,
    Rating,
    State,
)
from deckcore.fsrs.memory_state import round_half_up


def steps_for_state(state: State) -> tuple[int, ...]:
    if state in (State.REVIEW, State.RELEARNING):
        return RELEARNING_STEPS
    return LEARNING_STEPS


def hard_step_minutes(steps: tuple[int, ...]) -> int:
    """
    Delay for HARD while on the ladder.

    Midway between the first two steps, or 1.5x the only step.
    """
    if len(steps) == 1:
        return round_half_up(steps[0] * HARD_SINGLE_STEP_MULTIPLIER)
    return round_half_up((steps[0] + steps[1]) / 2)


def step_outcomes(state: State, current_step: int) -> dict[Rating, tuple[int, int]]:
    """
    Map each rating that stays on the ladder to (delay_minutes, next_step).

    Ratings missing from the result graduate to Review.

    Args:
        state: Coarse state before the review
        current_step: Card's current position on the ladder

    Returns:
        Dict of rating -> (minutes until due, new step index)
    """
    steps = steps_for_state(state)
    if not steps:
        return {}

    # A graduated card only drops back onto the ladder when it is forgotten
    if state == State.REVIEW:
        return {Rating.AGAIN: (steps[0], 0)}

    outcomes = {Rating.AGAIN: (steps[0], 0)}
    if current_step >= len(steps):
        return outcomes

    outcomes[Rating.HARD] = (hard_step_minutes(steps), current_step)
    if current_step + 1 < len(steps):
        outcomes[Rating.GOOD] = (steps[current_step + 1], current_step + 1)
    return outcomes
