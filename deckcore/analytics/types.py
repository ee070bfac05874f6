"""
Types for analytics dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd


@dataclass(frozen=True)
class DeckDashboardData:
    """
    Precomputed metrics and series for one deck (or all decks).
    """
    deck_id: Optional[str]
    label: str
    total_reviews: int
    studied_unique_current: int
    learned_current: int
    retention_rate: Optional[float]
    reviews_daily: pd.Series
    studied_cumulative_daily: pd.Series
    rating_breakdown: pd.Series
