"""
Analytics page rendering.
"""

from __future__ import annotations

from typing import Optional

import streamlit as st

from deckcore import decks_repo, fsrs
from deckcore.analytics import ALL_DECKS_LABEL, build_deck_dashboard


@st.cache_data(show_spinner=False)
def _cached_dashboard(user_id: str, deck_id: Optional[str], label: str):
    return build_deck_dashboard(user_id=user_id, deck_id=deck_id, label=label)


def render_analytics_page(user_options: dict[str, str]) -> None:
    del user_options  # reserved for future sign-in integration

    st.subheader("Learning Analytics")
    st.caption(f"User: {st.session_state.user_label} ({st.session_state.user_id})")

    decks = decks_repo.list_decks(st.session_state.user_id)
    deck_options: dict[str, Optional[str]] = {ALL_DECKS_LABEL: None}
    deck_options.update({deck["title"]: deck["id"] for deck in decks})
    selected_label = st.selectbox("Deck", list(deck_options), key="analytics_deck")

    if st.button("Refresh Analytics", use_container_width=False):
        _cached_dashboard.clear()
        st.rerun()

    dashboard = _cached_dashboard(
        st.session_state.user_id, deck_options[selected_label], selected_label
    )

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Reviews", f"{dashboard.total_reviews:,}")
    with col2:
        st.metric("Cards Studied", f"{dashboard.studied_unique_current:,}")
    with col3:
        learned_help = f"Cards with retrievability >= {fsrs.REQUEST_RETENTION:.2f}"
        st.metric("Learned (Current)", f"{dashboard.learned_current:,}", help=learned_help)
    with col4:
        retention = dashboard.retention_rate
        st.metric("Recall Rate", "-" if retention is None else f"{retention:.0%}")

    st.markdown("### Reviews Per Day")
    if dashboard.reviews_daily.empty:
        st.info("No reviews yet for this deck.")
        return
    st.bar_chart(dashboard.reviews_daily.rename("reviews").to_frame())

    st.markdown("### Cards Studied Over Time")
    st.line_chart(dashboard.studied_cumulative_daily.rename("studied_cumulative").to_frame())

    st.markdown("### Ratings")
    st.bar_chart(dashboard.rating_breakdown.rename("reviews").to_frame())
