from datetime import timedelta

import pandas as pd
import pytest

from conftest import T0, USER
from deckcore.analytics import ALL_DECKS_LABEL, build_deck_dashboard
from deckcore.analytics.metrics import compute_learned_count
from deckcore.study.review_applier import submit_review


def test_empty_dashboard(deck_id):
    dashboard = build_deck_dashboard(USER, deck_id, label="Biology")

    assert dashboard.label == "Biology"
    assert dashboard.total_reviews == 0
    assert dashboard.studied_unique_current == 0
    assert dashboard.learned_current == 0
    assert dashboard.retention_rate is None
    assert dashboard.reviews_daily.empty
    assert dashboard.rating_breakdown.tolist() == [0, 0, 0, 0]


def test_dashboard_after_reviews(deck_id, make_card):
    first = make_card(deck_id)
    second = make_card(deck_id)
    submit_review(USER, first, "GOOD", now=T0)
    submit_review(USER, first, "AGAIN", now=T0 + timedelta(minutes=10))
    submit_review(USER, second, "EASY", now=T0 + timedelta(days=1))

    dashboard = build_deck_dashboard(USER, deck_id, label="Biology")

    assert dashboard.total_reviews == 3
    assert dashboard.studied_unique_current == 2
    assert dashboard.retention_rate == pytest.approx(2 / 3)
    assert dashboard.reviews_daily.tolist() == [2, 1]
    assert dashboard.studied_cumulative_daily.tolist() == [1, 2]
    assert dashboard.rating_breakdown.to_dict() == {"AGAIN": 1, "HARD": 0, "GOOD": 1, "EASY": 1}


def test_all_decks_dashboard(make_deck, make_card):
    biology = make_deck("Biology")
    chemistry = make_deck("Chemistry")
    submit_review(USER, make_card(biology), "GOOD", now=T0)
    submit_review(USER, make_card(chemistry), "HARD", now=T0)

    dashboard = build_deck_dashboard(USER)

    assert dashboard.deck_id is None
    assert dashboard.label == ALL_DECKS_LABEL
    assert dashboard.total_reviews == 2
    assert dashboard.studied_unique_current == 2


def test_learned_count_threshold():
    df = pd.DataFrame({"card_id": ["a", "b", "c"], "retrievability": [0.95, 0.9, 0.5]})

    assert compute_learned_count(df, 0.9) == 2
    assert compute_learned_count(pd.DataFrame(columns=["card_id", "retrievability"]), 0.9) == 0
