from datetime import timedelta

import pytest

from conftest import OTHER_USER, T0, USER
from deckcore import fsrs
from deckcore.decks_repo import require_owned_card
from deckcore.errors import ConflictError, InvalidInputError, NotFoundError, PersistenceError
from deckcore.fsrs import Rating, State
from deckcore.fsrs.database import get_session, session_scope
from deckcore.fsrs.models import Review as ReviewModel, ScheduleState as ScheduleStateModel
from deckcore.study import review_applier
from deckcore.study.review_applier import apply_review, submit_review


def _schedule_row(card_id):
    session = get_session()
    try:
        return session.query(ScheduleStateModel).filter_by(card_id=card_id).one_or_none()
    finally:
        session.close()


def _review_count():
    session = get_session()
    try:
        return session.query(ReviewModel).count()
    finally:
        session.close()


def test_first_good_review(card_id, deck_id):
    outcome = submit_review(USER, card_id, "GOOD", now=T0)

    state = outcome.schedule_state
    assert state.repetitions == 1
    assert state.due_at == T0 + timedelta(minutes=10)
    assert state.interval_minutes == 10
    assert state.fsrs_state == State.LEARNING
    assert state.last_reviewed_at == T0

    review = outcome.review
    assert review.rating == Rating.GOOD
    assert review.previous_due_at is None
    assert review.previous_interval == 0
    assert review.next_interval == 10
    assert review.scheduled_due_at == state.due_at
    assert review.deck_id == deck_id
    assert review.user_id == USER

    row = _schedule_row(card_id)
    assert row.due_at == state.due_at
    assert row.version == 1
    assert row.fsrs_stability == pytest.approx(state.fsrs_stability)


def test_again_after_good(card_id):
    submit_review(USER, card_id, Rating.GOOD, now=T0)
    outcome = submit_review(USER, card_id, Rating.AGAIN, now=T0 + timedelta(minutes=10))

    assert outcome.schedule_state.repetitions == 2
    assert outcome.schedule_state.interval_minutes == 1
    assert outcome.schedule_state.fsrs_lapses == 0
    assert outcome.review.previous_due_at == T0 + timedelta(minutes=10)
    assert outcome.review.previous_interval == 10
    assert outcome.review.next_interval == 1

    history = fsrs.get_review_history(USER)
    assert [entry["rating"] for entry in history] == ["GOOD", "AGAIN"]
    assert _schedule_row(card_id).version == 2


def test_graduation_to_review(card_id):
    submit_review(USER, card_id, Rating.GOOD, now=T0)
    outcome = submit_review(USER, card_id, Rating.GOOD, now=T0 + timedelta(minutes=10))

    state = outcome.schedule_state
    assert state.fsrs_state == State.REVIEW
    assert state.fsrs_scheduled_days >= 1
    assert state.interval_minutes == state.fsrs_scheduled_days * 1440
    assert 1.3 <= state.ease_factor <= 2.5


def test_review_of_unowned_card_is_not_found(card_id):
    with pytest.raises(NotFoundError):
        submit_review(OTHER_USER, card_id, "GOOD", now=T0)

    assert _schedule_row(card_id) is None
    assert _review_count() == 0


def test_review_of_missing_card_is_not_found():
    with pytest.raises(NotFoundError):
        submit_review(USER, "no-such-card", "GOOD", now=T0)


@pytest.mark.parametrize("rating", ["good", "MEH", "", 3, None])
def test_invalid_rating_is_rejected(card_id, rating):
    with pytest.raises(InvalidInputError):
        submit_review(USER, card_id, rating, now=T0)

    assert _review_count() == 0


def test_failed_review_insert_writes_nothing(card_id, monkeypatch):
    def broken_review(**kwargs):
        kwargs["next_interval"] = None
        return ReviewModel(**kwargs)

    monkeypatch.setattr(review_applier, "ReviewModel", broken_review)

    with pytest.raises(PersistenceError):
        submit_review(USER, card_id, "GOOD", now=T0)

    assert _schedule_row(card_id) is None
    assert _review_count() == 0


def test_stale_version_raises_conflict(card_id):
    submit_review(USER, card_id, "GOOD", now=T0)

    with pytest.raises(ConflictError):
        with session_scope() as session:
            card = require_owned_card(session, USER, card_id)
            stale = card.schedule_state
            # Another writer bumps the version behind this session's back
            session.query(ScheduleStateModel).filter_by(card_id=card_id).update(
                {"version": stale.version + 1}, synchronize_session=False
            )
            apply_review(
                session,
                card_id=card_id,
                deck_id=card.deck_id,
                user_id=USER,
                schedule_state=stale,
                rating=Rating.GOOD,
                now=T0 + timedelta(minutes=10),
            )

    row = _schedule_row(card_id)
    assert row.version == 1
    assert row.repetitions == 1
    assert _review_count() == 1


def test_concurrent_first_review_raises_conflict(card_id):
    session = get_session()
    try:
        card = require_owned_card(session, USER, card_id)
        assert card.schedule_state is None

        submit_review(USER, card_id, "GOOD", now=T0)

        with pytest.raises(ConflictError):
            apply_review(
                session,
                card_id=card_id,
                deck_id=card.deck_id,
                user_id=USER,
                schedule_state=None,
                rating=Rating.EASY,
                now=T0,
            )
        session.rollback()
    finally:
        session.close()

    assert _review_count() == 1
    assert _schedule_row(card_id).repetitions == 1


def test_legacy_row_is_upgraded_on_review(card_id):
    with session_scope() as session:
        session.add(ScheduleStateModel(
            card_id=card_id,
            due_at=T0,
            last_reviewed_at=T0 - timedelta(days=3),
            interval_minutes=3 * 1440,
            repetitions=2,
            version=1,
        ))

    outcome = submit_review(USER, card_id, "GOOD", now=T0)

    state = outcome.schedule_state
    assert state.repetitions == 3
    assert state.fsrs_state == State.REVIEW
    assert state.fsrs_stability > 3.0
    assert state.fsrs_difficulty > 0
    assert outcome.review.previous_interval == 3 * 1440
    assert _schedule_row(card_id).version == 2


def test_forgotten_review_card_counts_lapse(card_id):
    submit_review(USER, card_id, "EASY", now=T0)
    due = _schedule_row(card_id).due_at

    outcome = submit_review(USER, card_id, "AGAIN", now=due)

    assert outcome.schedule_state.fsrs_state == State.RELEARNING
    row = _schedule_row(card_id)
    assert row.fsrs_state == State.RELEARNING
    assert row.fsrs_lapses == 1
    assert row.fsrs_learning_steps == 0
    assert row.interval_minutes == 10
    assert row.due_at == due + timedelta(minutes=10)
