"""
Add commission tracking fields to appointments table

Migration to add:
- commission (barber share of the service price)
- commission_paid

Run with: python -m migrations.add_commission_fields
"""

import sys

from sqlalchemy import inspect, text

from app.database import engine

COLUMNS = {
    "commission": "ALTER TABLE appointments ADD COLUMN commission NUMERIC(10, 2) NOT NULL DEFAULT 0",
    "commission_paid": "ALTER TABLE appointments ADD COLUMN commission_paid BOOLEAN NOT NULL DEFAULT FALSE",
}


def upgrade(target_engine=engine):
    """Add commission fields; columns that already exist are left alone"""
    existing_columns = {column["name"] for column in inspect(target_engine).get_columns("appointments")}

    with target_engine.begin() as conn:
        for name, statement in COLUMNS.items():
            if name in existing_columns:
                print(f"ℹ️  {name} column already exists")
                continue
            conn.execute(text(statement))
            print(f"✅ Added {name} column")

    print("\n✅ Migration completed successfully!")


if __name__ == "__main__":
    try:
        upgrade()
    except Exception as e:
        print(f"❌ Migration failed: {e}")
        sys.exit(1)
