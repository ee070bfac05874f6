"""
Stability and Difficulty Updates

Implements the FSRS-6 memory-state transitions.

Three kinds of stability update exist:
- Recall: the card was remembered after at least one calendar day
- Forget: the card was rated AGAIN after at least one calendar day
- Same-day: any rating on the same calendar day as the previous review

Key principles:
- Spaced, effortful success produces the largest stability gains
- Failures reset stability low, but never above its previous value
- Difficulty drifts towards the EASY initial difficulty (mean reversion)
"""

from __future__ import annotations
import math

from deckcore.fsrs.constants import (
    D_MAX,
    D_MIN,
    DEFAULT_WEIGHTS as W,
    INITIAL_STABILITY_FLOOR,
    Rating,
    S_MAX,
    S_MIN,
)


def clamp_stability(stability: float) -> float:
    return min(max(stability, S_MIN), S_MAX)


def clamp_difficulty(difficulty: float) -> float:
    return min(max(difficulty, D_MIN), D_MAX)


def initial_stability(rating: Rating) -> float:
    """
    Stability after the very first review.

    Formula: S0(G) = w[G-1], floored at INITIAL_STABILITY_FLOOR
    """
    return max(W[rating - 1], INITIAL_STABILITY_FLOOR)


def initial_difficulty(rating: Rating) -> float:
    """
    Unclamped difficulty after the very first review.

    Formula: D0(G) = w4 - e^(w5 * (G - 1)) + 1

    The unclamped value is the mean-reversion target in next_difficulty;
    callers assigning it to a card should pass it through clamp_difficulty.
    """
    return W[4] - math.exp(W[5] * (rating - 1)) + 1


def next_difficulty(difficulty: float, rating: Rating) -> float:
    """
    Update difficulty after a review.

    Formula:
        ΔD = -w6 * (G - 3)
        D' = D + ΔD * (10 - D) / 9          (linear damping)
        D'' = w7 * D0(EASY) + (1 - w7) * D'  (mean reversion)

    Args:
        difficulty: Current difficulty
        rating: Rating given in this review

    Returns:
        New difficulty clamped to [D_MIN, D_MAX]
    """
    delta = -W[6] * (rating - 3)
    damped = difficulty + delta * (10 - difficulty) / 9
    reverted = W[7] * initial_difficulty(Rating.EASY) + (1 - W[7]) * damped
    return clamp_difficulty(reverted)


def next_recall_stability(
    difficulty: float,
    stability: float,
    retrievability: float,
    rating: Rating
) -> float:
    """
    Update stability after a successful recall (HARD/GOOD/EASY).

    Formula:
        S' = S * (1 + e^w8 * (11 - D) * S^-w9 * (e^(w10 * (1 - R)) - 1)
                  * hard_penalty * easy_bonus)

    Where:
        - (e^(w10 * (1 - R)) - 1) rewards risky (well-spaced) success
        - hard_penalty = w15 for HARD, else 1
        - easy_bonus = w16 for EASY, else 1
    """
    hard_penalty = W[15] if rating == Rating.HARD else 1.0
    easy_bonus = W[16] if rating == Rating.EASY else 1.0
    growth = (
        math.exp(W[8])
        * (11 - difficulty)
        * stability ** -W[9]
        * (math.exp((1 - retrievability) * W[10]) - 1)
        * hard_penalty
        * easy_bonus
    )
    return clamp_stability(stability * (1 + growth))


def next_forget_stability(
    difficulty: float,
    stability: float,
    retrievability: float
) -> float:
    """
    Post-lapse stability after an AGAIN rating.

    Formula:
        S' = w11 * D^-w12 * ((S + 1)^w13 - 1) * e^(w14 * (1 - R))

    Capped from above by S / e^(w17 * w18) so a lapse never raises
    stability above what a same-day failure would give.
    """
    long_term = (
        W[11]
        * difficulty ** -W[12]
        * ((stability + 1) ** W[13] - 1)
        * math.exp((1 - retrievability) * W[14])
    )
    short_term_cap = stability / math.exp(W[17] * W[18])
    return clamp_stability(min(long_term, short_term_cap))


def next_short_term_stability(stability: float, rating: Rating) -> float:
    """
    Update stability for a review on the same calendar day.

    Formula:
        SInc = e^(w17 * (G - 3 + w18)) * S^-w19
        S' = S * SInc, with SInc floored at 1 for GOOD and EASY
    """
    increase = math.exp(W[17] * (rating - 3 + W[18])) * stability ** -W[19]
    if rating >= Rating.GOOD:
        increase = max(increase, 1.0)
    return clamp_stability(stability * increase)
