"""
Enforce one auto-generated income per record

Migration to:
- remove duplicate record incomes (keeps the oldest row per record)
- add UNIQUE index uq_incomes_record_id on incomes.record_id

Manual incomes (record_id NULL) are unaffected.

Run with: python migrations/add_income_record_unique_index.py [--down]
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect, text

from bookkeeper.database import engine

INDEX_NAME = "uq_incomes_record_id"


def upgrade():
    """Deduplicate record incomes and add the unique index"""
    with engine.connect() as conn:
        existing_indexes = {ix["name"] for ix in inspect(conn).get_indexes("incomes")}
        if INDEX_NAME in existing_indexes:
            print(f"ℹ️  {INDEX_NAME} already exists")
            return

        result = conn.execute(
            text(
                """
                DELETE FROM incomes
                WHERE record_id IS NOT NULL
                AND id NOT IN (
                    SELECT MIN(id) FROM incomes
                    WHERE record_id IS NOT NULL
                    GROUP BY record_id
                )
                """
            )
        )
        print(f"✅ Removed {result.rowcount} duplicate record incomes")

        conn.execute(text(f"CREATE UNIQUE INDEX {INDEX_NAME} ON incomes (record_id)"))
        print(f"✅ Created {INDEX_NAME}")

        conn.commit()
        print("\n✅ Migration completed successfully!")


def downgrade():
    """Drop the unique index (removed duplicates are not restored)"""
    with engine.connect() as conn:
        conn.execute(text(f"DROP INDEX IF EXISTS {INDEX_NAME}"))
        conn.commit()
        print(f"✅ Dropped {INDEX_NAME}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Manage the income-per-record unique index migration")
    parser.add_argument("--down", action="store_true", help="Rollback the migration")
    args = parser.parse_args()

    if args.down:
        print("Rolling back migration...")
        downgrade()
    else:
        print("Running migration...")
        upgrade()
