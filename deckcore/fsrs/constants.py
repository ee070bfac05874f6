"""
FSRS Constants and Parameters

All configurable parameters for the FSRS-6 scheduler in one place.
Weights are the published FSRS-6 defaults; scheduling is deterministic
(no interval fuzz) and short-term steps are enabled.
"""

from enum import IntEnum


# ---- Ratings ----

class Rating(IntEnum):
    """User feedback on a retrieval attempt."""
    AGAIN = 1   # Retrieval failed
    HARD = 2    # Retrieved with high effort
    GOOD = 3    # Retrieved normally
    EASY = 4    # Retrieved fluently

    @classmethod
    def parse(cls, value: str) -> "Rating":
        """Parse one of the literal strings AGAIN/HARD/GOOD/EASY."""
        if not isinstance(value, str) or value not in cls.__members__:
            raise ValueError(f"Unknown rating: {value!r}")
        return cls[value]


# ---- Coarse Card States ----

class State(IntEnum):
    """Qualitative phase of a card, persisted as a small integer."""
    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3

    @classmethod
    def decode(cls, value) -> "State":
        """Decode a persisted value; anything unknown falls back to NEW."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.NEW


# ---- Model Weights (FSRS-6 defaults) ----

DEFAULT_WEIGHTS = (
    0.212, 1.2931, 2.3065, 8.2956,  # w0-w3: initial stability per rating
    6.4133, 0.8334,                 # w4-w5: initial difficulty
    3.0194, 0.001,                  # w6-w7: difficulty delta, mean reversion
    1.8722, 0.1666, 0.796,          # w8-w10: recall stability
    1.4835, 0.0614, 0.2629, 1.6483, # w11-w14: forget stability
    0.6014, 1.8729,                 # w15-w16: hard penalty, easy bonus
    0.5425, 0.0912, 0.0658,         # w17-w19: same-day stability
    0.1542,                         # w20: forgetting curve decay
)


# ---- Global Constants ----

REQUEST_RETENTION = 0.90  # Target recall probability at the due date
MAXIMUM_INTERVAL = 36500  # Longest interval (days)
S_MIN = 0.001             # Minimum stability (days)
S_MAX = 36500.0           # Maximum stability (days)
D_MIN = 1.0               # Minimum difficulty
D_MAX = 10.0              # Maximum difficulty
INITIAL_STABILITY_FLOOR = 0.1


# ---- Short-Term Steps (minutes) ----

LEARNING_STEPS = (1, 10)
RELEARNING_STEPS = (10,)
HARD_SINGLE_STEP_MULTIPLIER = 1.5


# ---- Derived Display Metrics ----

MINUTES_PER_DAY = 24 * 60
MIN_INTERVAL_MINUTES = 1
MIN_EASE_FACTOR = 1.3


# ---- Legacy Reconstruction ----
# Applied to schedule rows written before full model state was stored

LEGACY_MIN_STABILITY = 0.1
LEGACY_DIFFICULTY = 5.0   # Neutral midpoint of the difficulty scale
