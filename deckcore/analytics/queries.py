"""
Data-loading helpers for analytics.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import pandas as pd

from deckcore import fsrs
from deckcore.fsrs.memory_state import days_between

REVIEW_COLUMNS = ["card_id", "deck_id", "rating", "created_at", "day_utc"]


def load_reviews_df(user_id: str, deck_id: Optional[str] = None) -> pd.DataFrame:
    """
    Load review history for a user (optionally one deck) into a dataframe.
    """
    rows = fsrs.get_review_history(user_id=user_id, deck_id=deck_id)
    if not rows:
        return pd.DataFrame(columns=REVIEW_COLUMNS)

    df = pd.DataFrame(rows)
    df = df[["card_id", "deck_id", "rating", "created_at"]].copy()
    df["created_at"] = pd.to_datetime(df["created_at"], utc=True, errors="coerce")
    df = df.dropna(subset=["card_id", "created_at"])
    df["day_utc"] = df["created_at"].dt.floor("D")
    df = df.sort_values("created_at").reset_index(drop=True)
    return df


def load_retrievability_df(
    user_id: str,
    deck_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> pd.DataFrame:
    """
    Current retrievability of every scheduled card for a user/deck.
    """
    rows = fsrs.get_schedule_rows(user_id=user_id, deck_id=deck_id)
    if not rows:
        return pd.DataFrame(columns=["card_id", "retrievability"])

    now = now or datetime.now(timezone.utc)
    return pd.DataFrame(
        [
            {
                "card_id": row["card_id"],
                "retrievability": fsrs.calculate_retrievability(
                    row["fsrs_stability"],
                    days_between(row["last_reviewed_at"], now),
                ),
            }
            for row in rows
        ]
    )
