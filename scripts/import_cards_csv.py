"""
Import question/answer pairs from a CSV file into a deck.

The CSV needs `question` and `answer` columns. Blank rows and pairs already
in the deck (compared case- and whitespace-insensitively) are skipped.

Usage:
  python -m scripts.import_cards_csv --user demo --deck <deck_id> cards.csv
  python -m scripts.import_cards_csv --user demo --new-deck "Biology" cards.csv
"""

from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from deckcore import decks_repo
from deckcore.fsrs import init_db

QUESTION_COL = "question"
ANSWER_COL = "answer"


def normalize(s: pd.Series) -> pd.Series:
    s = s.fillna("").astype(str).str.strip().str.lower()
    return s.str.replace(r"\s+", " ", regex=True)


def import_cards(user_id: str, deck_id: str, csv_path: Path) -> int:
    """
    Add new cards from a CSV to a deck.

    Returns:
        Number of cards added
    """
    df = pd.read_csv(csv_path, dtype=str)
    missing = {QUESTION_COL, ANSWER_COL} - set(df.columns)
    if missing:
        raise ValueError(f"CSV missing columns: {', '.join(sorted(missing))}")

    df = df[[QUESTION_COL, ANSWER_COL]].fillna("")
    df["_key"] = normalize(df[QUESTION_COL]) + "\t" + normalize(df[ANSWER_COL])
    df = df[(df[QUESTION_COL].str.strip() != "") & (df[ANSWER_COL].str.strip() != "")]
    df = df.drop_duplicates(subset="_key")

    existing = pd.DataFrame(decks_repo.list_cards(user_id, deck_id))
    if not existing.empty:
        existing_keys = set(normalize(existing[QUESTION_COL]) + "\t" + normalize(existing[ANSWER_COL]))
        df = df[~df["_key"].isin(existing_keys)]

    for row in df.itertuples(index=False):
        decks_repo.add_card(user_id, deck_id, getattr(row, QUESTION_COL), getattr(row, ANSWER_COL))
    return len(df)


def main() -> None:
    parser = argparse.ArgumentParser(description="Import cards from CSV into a deck")
    parser.add_argument("csv_path", type=Path)
    parser.add_argument("--user", required=True, help="Owner user id")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--deck", help="Existing deck id")
    group.add_argument("--new-deck", help="Title of a deck to create")
    args = parser.parse_args()

    init_db()
    deck_id = args.deck or decks_repo.create_deck(args.user, args.new_deck)["id"]
    added = import_cards(args.user, deck_id, args.csv_path)
    print(f"✓ Added {added} cards to deck {deck_id}")


if __name__ == "__main__":
    main()
