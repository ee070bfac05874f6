"""
Analytics package exports.
"""

from deckcore.analytics.service import ALL_DECKS_LABEL, build_deck_dashboard
from deckcore.analytics.types import DeckDashboardData

__all__ = [
    "ALL_DECKS_LABEL",
    "build_deck_dashboard",
    "DeckDashboardData",
]
