"""
Reset the study database.

DANGEROUS: This deletes all decks, cards and review history!
Only use when you want to start fresh for testing.

Usage:
    python -m scripts.maintenance.reset_study_db
"""

from deckcore import fsrs


def main():
    print("=" * 60)
    print("WARNING: Reset Study Database")
    print("=" * 60)
    print()
    print("This will DELETE:")
    print("  - All decks and cards")
    print("  - All schedule states (stability, difficulty, due dates)")
    print("  - All reviews (history of past reviews)")
    print()

    response = input("Are you sure you want to reset? (type 'yes' to confirm): ")

    if response.lower() == "yes":
        print("\nResetting database...")
        fsrs.reset_db()
        print("✓ Database reset complete!")
        print("\nThe database now has empty tables ready for new decks.")
    else:
        print("\nCancelled. No changes made.")


if __name__ == "__main__":
    main()
