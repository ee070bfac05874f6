"""
Metric computations for analytics dashboards.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from deckcore.fsrs.constants import Rating


RATING_ORDER = [rating.name for rating in Rating]


def build_day_index(reviews_df: pd.DataFrame) -> pd.DatetimeIndex:
    """
    Build a dense UTC day index spanning the review range.
    """
    if reviews_df.empty:
        return pd.DatetimeIndex([], tz="UTC")
    start = reviews_df["day_utc"].min()
    end = reviews_df["day_utc"].max()
    return pd.date_range(start=start, end=end, freq="D", tz="UTC")


def compute_studied_unique(reviews_df: pd.DataFrame) -> int:
    """
    Count unique reviewed card_ids.
    """
    if reviews_df.empty:
        return 0
    return int(reviews_df["card_id"].nunique())


def compute_retention_rate(reviews_df: pd.DataFrame) -> Optional[float]:
    """
    Share of reviews not rated AGAIN, or None without reviews.
    """
    if reviews_df.empty:
        return None
    return float((reviews_df["rating"] != Rating.AGAIN.name).mean())


def compute_reviews_daily(
    reviews_df: pd.DataFrame,
    day_index: pd.DatetimeIndex
) -> pd.Series:
    """
    Number of reviews per UTC day.
    """
    if reviews_df.empty or len(day_index) == 0:
        return pd.Series(dtype="int64")
    counts = reviews_df.groupby("day_utc").size()
    return counts.reindex(day_index, fill_value=0).astype("int64")


def compute_studied_cumulative(
    reviews_df: pd.DataFrame,
    day_index: pd.DatetimeIndex
) -> pd.Series:
    """
    Cumulative unique studied cards by first-review day.
    """
    if reviews_df.empty or len(day_index) == 0:
        return pd.Series(dtype="int64")

    first_seen = reviews_df.groupby("card_id")["created_at"].min().dt.floor("D")
    counts = first_seen.value_counts().sort_index()
    return counts.reindex(day_index, fill_value=0).cumsum().astype("int64")


def compute_rating_breakdown(reviews_df: pd.DataFrame) -> pd.Series:
    """
    Review count per rating, in AGAIN..EASY order.
    """
    if reviews_df.empty:
        return pd.Series(0, index=RATING_ORDER, dtype="int64")
    return reviews_df["rating"].value_counts().reindex(RATING_ORDER, fill_value=0).astype("int64")


def compute_learned_count(retrievability_df: pd.DataFrame, r_target: float) -> int:
    """
    Cards whose current retrievability is at or above the threshold.
    """
    if retrievability_df.empty:
        return 0
    return int((retrievability_df["retrievability"] >= r_target).sum())
