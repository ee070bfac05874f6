"""
Backfill memory-model state on legacy schedule rows.

Rows written before full model storage have zero stability or difficulty.
Each one is decoded through the legacy adapter and the inferred state
(stability, difficulty, coarse state, scheduled days) is written back, so
later reviews read it as full model state.

Lapses cannot be recovered from legacy rows and are written as 0.

This script is idempotent: rows that already hold full model state are
skipped.

Usage:
  python -m scripts.backfill_fsrs_state [--dry-run]

Requires DATABASE_URL (and optionally TEST_MODE) in the environment.
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime, timezone

from deckcore.fsrs import legacy
from deckcore.fsrs.database import session_scope
from deckcore.fsrs.memory_state import ease_factor_from_difficulty
from deckcore.fsrs.models import ScheduleState as ScheduleStateModel

logger = logging.getLogger(__name__)


def backfill_legacy_rows(dry_run: bool = False) -> int:
    """
    Rewrite every legacy schedule row as full model state.

    Args:
        dry_run: Count rows without writing

    Returns:
        Number of legacy rows found
    """
    now = datetime.now(timezone.utc)
    converted = 0

    with session_scope() as session:
        rows = session.query(ScheduleStateModel).all()
        for row in rows:
            stored = legacy.decode_schedule_row(row)
            if not isinstance(stored, legacy.LegacyPartial):
                continue

            converted += 1
            memory = legacy.to_memory_state(stored, now)
            logger.info(
                "Card %s: legacy reps=%d interval=%d min -> state=%s stability=%.2f",
                row.card_id, stored.repetitions, stored.interval_minutes,
                memory.state.name, memory.stability,
            )
            if dry_run:
                continue

            row.fsrs_state = int(memory.state)
            row.fsrs_stability = memory.stability
            row.fsrs_difficulty = memory.difficulty
            row.fsrs_elapsed_days = memory.elapsed_days
            row.fsrs_scheduled_days = memory.scheduled_days
            row.fsrs_learning_steps = memory.learning_steps
            row.fsrs_lapses = memory.lapses
            row.ease_factor = ease_factor_from_difficulty(memory.difficulty)
            row.version = row.version + 1
            row.updated_at = now

        if dry_run:
            session.rollback()

    return converted


def main() -> None:
    parser = argparse.ArgumentParser(description="Backfill FSRS state on legacy schedule rows")
    parser.add_argument("--dry-run", action="store_true", help="Report rows without writing")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    count = backfill_legacy_rows(dry_run=args.dry_run)
    action = "Found" if args.dry_run else "Converted"
    print(f"✓ {action} {count} legacy schedule rows")
    if count:
        print("Note: lapse counts are not recorded on legacy rows and were set to 0.")


if __name__ == "__main__":
    main()
