from datetime import datetime, timedelta, timezone

import pytest

from deckcore import decks_repo
from deckcore.fsrs import database

T0 = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)
USER = "alice"
OTHER_USER = "bob"


@pytest.fixture(autouse=True)
def study_db(tmp_path, monkeypatch):
    """Fresh SQLite database per test."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'study.db'}")
    monkeypatch.delenv("TEST_MODE", raising=False)
    monkeypatch.delenv("GRADING_PROVIDER", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    database.dispose_engines()
    database.init_db()
    yield
    database.dispose_engines()


@pytest.fixture
def make_deck():
    def _make(title="Biology", user_id=USER):
        return decks_repo.create_deck(user_id, title)["id"]
    return _make


@pytest.fixture
def make_card():
    counter = {"n": 0}

    def _make(deck_id, question=None, answer="Powerhouse of the cell", user_id=USER, created_at=None):
        counter["n"] += 1
        if created_at is None:
            created_at = T0 - timedelta(days=1) + timedelta(seconds=counter["n"])
        return decks_repo.add_card(
            user_id,
            deck_id,
            question or f"Question {counter['n']}",
            answer,
            created_at=created_at,
        )["id"]
    return _make


@pytest.fixture
def deck_id(make_deck):
    return make_deck()


@pytest.fixture
def card_id(deck_id, make_card):
    return make_card(deck_id, question="What is the mitochondria?")
