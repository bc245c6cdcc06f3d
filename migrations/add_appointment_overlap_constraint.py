"""
Add an exclusion constraint that stops two active appointments with the same
barber_id from overlapping. Shop-wide appointments (no barber) share the
empty key, so two of them cannot overlap either.

The constraint does not catch a shop-wide appointment overlapping a barber's
appointment, since their keys differ. The scheduling service covers that case
with the exclusive global advisory lock and its shop-wide conflict check,
so this constraint is a backstop for the barber-scoped case.

PostgreSQL only.
Run with: python -m migrations.add_appointment_overlap_constraint
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import create_engine, text

root_dir = Path(__file__).parent.parent
env_path = root_dir / ".env"
load_dotenv(env_path)

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    print("❌ ERROR: DATABASE_URL not found")
    sys.exit(1)

CONSTRAINT_NAME = "appointments_no_overlap"

STATEMENTS = [
    "CREATE EXTENSION IF NOT EXISTS btree_gist",
    f"""
    ALTER TABLE appointments
    ADD CONSTRAINT {CONSTRAINT_NAME}
    EXCLUDE USING gist (
        (COALESCE(barber_id, '')) WITH =,
        tsrange(starts_at, ends_at, '[)') WITH &&
    )
    WHERE (status IN ('PENDING', 'CONFIRMED'))
    """,
]


def add_overlap_constraint(engine):
    if engine.dialect.name != "postgresql":
        print(f"⚠️  Skipping: exclusion constraints need PostgreSQL (got {engine.dialect.name})")
        return

    with engine.begin() as conn:
        exists = conn.execute(
            text("SELECT 1 FROM pg_constraint WHERE conname = :name"),
            {"name": CONSTRAINT_NAME},
        ).first()
        if exists:
            print(f"✅ Constraint {CONSTRAINT_NAME} already exists")
            return

        print("🚀 Adding appointment overlap constraint...")
        for statement in STATEMENTS:
            conn.execute(text(statement))

    print(f"✅ Constraint {CONSTRAINT_NAME} added")


if __name__ == "__main__":
    try:
        add_overlap_constraint(create_engine(DATABASE_URL))
    except Exception as e:
        print(f"❌ Migration failed: {e}")
        print("   Existing overlapping active appointments must be resolved first.")
        sys.exit(1)
