from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from deckcore.fsrs import legacy
from deckcore.fsrs.constants import State
from deckcore.fsrs.memory_state import MemoryState

T0 = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


def _row(**overrides):
    values = dict(
        due_at=T0,
        last_reviewed_at=T0 - timedelta(days=3),
        interval_minutes=3 * 1440,
        repetitions=2,
        fsrs_state=0,
        fsrs_stability=0.0,
        fsrs_difficulty=0.0,
        fsrs_elapsed_days=0,
        fsrs_scheduled_days=0,
        fsrs_learning_steps=0,
        fsrs_lapses=0,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_missing_row_is_uninitialized():
    stored = legacy.decode_schedule_row(None)
    assert isinstance(stored, legacy.Uninitialized)

    memory = legacy.to_memory_state(stored, T0)
    assert memory == MemoryState(due=T0)


def test_full_model_state_is_used_unchanged():
    row = _row(
        fsrs_state=2,
        fsrs_stability=12.5,
        fsrs_difficulty=4.2,
        fsrs_elapsed_days=6,
        fsrs_scheduled_days=12,
        fsrs_lapses=1,
    )
    stored = legacy.decode_schedule_row(row)
    assert isinstance(stored, legacy.FullModelState)

    memory = legacy.to_memory_state(stored, T0)
    assert memory.state == State.REVIEW
    assert memory.stability == 12.5
    assert memory.difficulty == 4.2
    assert memory.elapsed_days == 6
    assert memory.scheduled_days == 12
    assert memory.lapses == 1
    assert memory.reps == 2
    assert memory.due == T0
    assert memory.last_review == T0 - timedelta(days=3)


def test_legacy_row_is_reconstructed_as_review():
    stored = legacy.decode_schedule_row(_row())
    assert isinstance(stored, legacy.LegacyPartial)

    memory = legacy.to_memory_state(stored, T0)
    assert memory.state == State.REVIEW
    assert memory.scheduled_days == 3
    assert memory.stability == 3.0
    assert memory.difficulty == 5.0
    assert memory.lapses == 0
    assert memory.reps == 2


def test_legacy_row_without_repetitions_is_new():
    memory = legacy.reconstruct_memory_state(_row(repetitions=0, interval_minutes=10), T0)

    assert memory.state == State.NEW
    assert memory.scheduled_days == 0
    assert memory.stability == 0.1


def test_zero_difficulty_alone_means_legacy():
    row = _row(fsrs_stability=4.0, fsrs_difficulty=0.0)
    assert isinstance(legacy.decode_schedule_row(row), legacy.LegacyPartial)


def test_unknown_state_decodes_to_new():
    memory = legacy.reconstruct_memory_state(
        _row(fsrs_state=9, fsrs_stability=1.0, fsrs_difficulty=3.0), T0
    )
    assert memory.state == State.NEW

    assert State.decode(None) == State.NEW
    assert State.decode("2") == State.REVIEW


def test_naive_timestamps_are_read_as_utc():
    row = _row(due_at=T0.replace(tzinfo=None), last_reviewed_at=None)
    memory = legacy.reconstruct_memory_state(row, T0)

    assert memory.due == T0
    assert memory.due.tzinfo is not None
    assert memory.last_review is None
