from datetime import timedelta

import pytest

from conftest import OTHER_USER, T0, USER
from deckcore.errors import InvalidInputError, NotFoundError
from deckcore.study.review_applier import submit_review
from deckcore.study.session_selector import fill_in_order, get_study_session, validate_limit


def test_new_cards_are_due_now(deck_id, make_card):
    first = make_card(deck_id)
    second = make_card(deck_id)

    session = get_study_session(USER, deck_id, now=T0)

    assert session.due_now_count == 2
    assert [card.id for card in session.cards] == [first, second]
    assert all(card.schedule_state is None for card in session.cards)
    assert session.next_due_at is None
    assert session.deck_title == "Biology"


def test_reviewed_cards_leave_the_session(deck_id, make_card):
    first = make_card(deck_id)
    second = make_card(deck_id)
    submit_review(USER, first, "GOOD", now=T0)
    submit_review(USER, second, "AGAIN", now=T0)

    session = get_study_session(USER, deck_id, now=T0)

    assert session.due_now_count == 0
    assert session.cards == []
    assert session.next_due_at == T0 + timedelta(minutes=1)


def test_scheduled_cards_come_before_new(deck_id, make_card):
    new_card = make_card(deck_id)
    reviewed = make_card(deck_id)
    submit_review(USER, reviewed, "AGAIN", now=T0)

    session = get_study_session(USER, deck_id, now=T0 + timedelta(minutes=5))

    assert [card.id for card in session.cards] == [reviewed, new_card]
    assert session.cards[0].schedule_state.interval_minutes == 1
    assert session.due_now_count == 2


def test_most_overdue_first(deck_id, make_card):
    hard = make_card(deck_id)
    again = make_card(deck_id)
    submit_review(USER, hard, "HARD", now=T0)
    submit_review(USER, again, "AGAIN", now=T0)

    session = get_study_session(USER, deck_id, now=T0 + timedelta(hours=1))

    assert [card.id for card in session.cards] == [again, hard]


def test_limit_caps_cards_but_not_count(deck_id, make_card):
    cards = [make_card(deck_id) for _ in range(3)]

    session = get_study_session(USER, deck_id, limit=2, now=T0)

    assert [card.id for card in session.cards] == cards[:2]
    assert session.due_now_count == 3


def test_no_future_cards_are_selected(deck_id, make_card):
    due_soon = make_card(deck_id)
    due_later = make_card(deck_id)
    submit_review(USER, due_soon, "AGAIN", now=T0)
    submit_review(USER, due_later, "EASY", now=T0)

    now = T0 + timedelta(days=1)
    session = get_study_session(USER, deck_id, now=now)

    assert [card.id for card in session.cards] == [due_soon]
    assert all(card.schedule_state.due_at <= now for card in session.cards)
    assert session.next_due_at == T0 + timedelta(days=8)


def test_other_decks_are_ignored(deck_id, make_deck, make_card):
    other_deck = make_deck("Chemistry")
    make_card(other_deck)
    mine = make_card(deck_id)

    session = get_study_session(USER, deck_id, now=T0)

    assert [card.id for card in session.cards] == [mine]
    assert session.due_now_count == 1


def test_unowned_deck_is_not_found(deck_id):
    with pytest.raises(NotFoundError):
        get_study_session(OTHER_USER, deck_id, now=T0)


def test_missing_deck_is_not_found():
    with pytest.raises(NotFoundError):
        get_study_session(USER, "no-such-deck", now=T0)


@pytest.mark.parametrize("limit", [0, 101, -1, "5", 2.5, True])
def test_invalid_limit_is_rejected(deck_id, limit):
    with pytest.raises(InvalidInputError):
        get_study_session(USER, deck_id, limit=limit, now=T0)


def test_validate_limit_defaults():
    assert validate_limit(None) == 20
    assert validate_limit(1) == 1
    assert validate_limit(100) == 100


def test_fill_in_order_skips_duplicates():
    class Item:
        def __init__(self, id):
            self.id = id

    a, b, c = Item("a"), Item("b"), Item("c")
    filled = fill_in_order({"scheduled": [a, b], "new": [b, c]}, ["scheduled", "new"], 10)
    assert [item.id for item in filled] == ["a", "b", "c"]

    capped = fill_in_order({"scheduled": [a, b], "new": [c]}, ["scheduled", "new"], 2)
    assert [item.id for item in capped] == ["a", "b"]
