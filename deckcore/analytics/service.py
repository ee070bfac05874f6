"""
Service layer to assemble analytics dashboards per deck.
"""

from __future__ import annotations

from typing import Optional

from deckcore import fsrs
from deckcore.analytics.metrics import (
    build_day_index,
    compute_learned_count,
    compute_rating_breakdown,
    compute_retention_rate,
    compute_reviews_daily,
    compute_studied_cumulative,
    compute_studied_unique,
)
from deckcore.analytics.queries import load_retrievability_df, load_reviews_df
from deckcore.analytics.types import DeckDashboardData

ALL_DECKS_LABEL = "All decks"


def build_deck_dashboard(
    user_id: str,
    deck_id: Optional[str] = None,
    label: Optional[str] = None
) -> DeckDashboardData:
    """
    Build all KPI values and series needed by the analytics page for a deck.

    Pass deck_id=None to aggregate over every deck the user owns.
    """
    reviews_df = load_reviews_df(user_id=user_id, deck_id=deck_id)
    day_index = build_day_index(reviews_df)
    retrievability_df = load_retrievability_df(user_id=user_id, deck_id=deck_id)

    return DeckDashboardData(
        deck_id=deck_id,
        label=label or ALL_DECKS_LABEL,
        total_reviews=int(len(reviews_df)),
        studied_unique_current=compute_studied_unique(reviews_df),
        learned_current=compute_learned_count(retrievability_df, fsrs.REQUEST_RETENTION),
        retention_rate=compute_retention_rate(reviews_df),
        reviews_daily=compute_reviews_daily(reviews_df, day_index),
        studied_cumulative_daily=compute_studied_cumulative(reviews_df, day_index),
        rating_breakdown=compute_rating_breakdown(reviews_df),
    )
