from datetime import timedelta

from conftest import T0, USER
from deckcore import decks_repo
from deckcore.fsrs import State
from deckcore.fsrs.database import get_session, session_scope
from deckcore.fsrs.models import ScheduleState as ScheduleStateModel
from scripts.backfill_fsrs_state import backfill_legacy_rows
from scripts.import_cards_csv import import_cards


def _add_legacy_row(card_id):
    with session_scope() as session:
        session.add(ScheduleStateModel(
            card_id=card_id,
            due_at=T0,
            last_reviewed_at=T0 - timedelta(days=3),
            interval_minutes=3 * 1440,
            repetitions=2,
            version=1,
        ))


def _row(card_id):
    session = get_session()
    try:
        return session.query(ScheduleStateModel).filter_by(card_id=card_id).one()
    finally:
        session.close()


def test_backfill_dry_run_writes_nothing(card_id):
    _add_legacy_row(card_id)

    assert backfill_legacy_rows(dry_run=True) == 1

    row = _row(card_id)
    assert row.fsrs_stability == 0.0
    assert row.version == 1


def test_backfill_converts_legacy_rows_once(card_id):
    _add_legacy_row(card_id)

    assert backfill_legacy_rows() == 1

    row = _row(card_id)
    assert row.fsrs_state == State.REVIEW
    assert row.fsrs_stability == 3.0
    assert row.fsrs_difficulty == 5.0
    assert row.fsrs_scheduled_days == 3
    assert row.ease_factor == 1.5
    assert row.version == 2
    assert row.due_at == T0

    assert backfill_legacy_rows() == 0


def test_import_cards_skips_blanks_and_duplicates(deck_id, tmp_path):
    decks_repo.add_card(USER, deck_id, "What is ATP?", "Energy currency")
    csv_path = tmp_path / "cards.csv"
    csv_path.write_text(
        "question,answer\n"
        "What is ATP?,energy  currency\n"
        "What is DNA?,Genetic material\n"
        "what is dna?,genetic material\n"
        ",Orphan answer\n"
        "What is RNA?,Messenger\n"
    )

    assert import_cards(USER, deck_id, csv_path) == 2

    questions = [card["question"] for card in decks_repo.list_cards(USER, deck_id)]
    assert sorted(questions) == ["What is ATP?", "What is DNA?", "What is RNA?"]

    assert import_cards(USER, deck_id, csv_path) == 0
