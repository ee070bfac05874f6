"""
FSRS - Free Spaced Repetition Scheduler

Memory model, scheduler and persistence for the flashcard study core.

This module implements FSRS-6 scheduling with:
- Power forgetting curve: R = (1 + FACTOR * t / S) ^ DECAY
- Minute-level learning and relearning steps
- Deterministic intervals (no fuzz)
- Reconstruction of legacy schedule rows

Quick start:
    from deckcore import fsrs

    # Initialize database
    fsrs.init_db()

    # Process a review (algorithm only, no DB calls)
    card = fsrs.new_card(now)
    card = fsrs.process_review(card, fsrs.Rating.GOOD, now)
"""

# Core scheduler API (algorithm logic)
from deckcore.fsrs.scheduler import process_review, preview_ratings

# Database API
from deckcore.fsrs.database import (
    init_db,
    reset_db,
    is_test_mode,
    get_default_user_id,
    get_session,
    session_scope,
    get_review_history,
    get_schedule_rows,
)

# Constants and parameters
from deckcore.fsrs.constants import (
    Rating,
    State,
    REQUEST_RETENTION,
    MAXIMUM_INTERVAL,
    S_MIN,
    D_MIN,
    D_MAX,
    LEARNING_STEPS,
    RELEARNING_STEPS,
)

# Memory state (for advanced usage)
from deckcore.fsrs.memory_state import (
    MemoryState,
    new_card,
    calculate_retrievability,
    ease_factor_from_difficulty,
    interval_minutes_between,
)

# Legacy reconstruction
from deckcore.fsrs.legacy import (
    Uninitialized,
    LegacyPartial,
    FullModelState,
    decode_schedule_row,
    to_memory_state,
    reconstruct_memory_state,
)


__all__ = [
    # Core algorithm
    "process_review",
    "preview_ratings",

    # Database operations
    "init_db",
    "reset_db",
    "is_test_mode",
    "get_default_user_id",
    "get_session",
    "session_scope",
    "get_review_history",
    "get_schedule_rows",

    # Enums
    "Rating",
    "State",

    # Memory state
    "MemoryState",
    "new_card",
    "calculate_retrievability",
    "ease_factor_from_difficulty",
    "interval_minutes_between",

    # Legacy reconstruction
    "Uninitialized",
    "LegacyPartial",
    "FullModelState",
    "decode_schedule_row",
    "to_memory_state",
    "reconstruct_memory_state",

    # Parameters
    "REQUEST_RETENTION",
    "MAXIMUM_INTERVAL",
    "S_MIN",
    "D_MIN",
    "D_MAX",
    "LEARNING_STEPS",
    "RELEARNING_STEPS",
]
