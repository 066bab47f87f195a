#!/usr/bin/env python3
"""
Create All Database Tables Script

Creates every ReadRival table registered on the SQLAlchemy metadata.

Usage:
    python scripts/create_tables.py
"""

import sys

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from readrival.core.database import engine, init_db
from readrival.core.settings import settings


def create_all_tables() -> bool:
    """Create all database tables."""
    print("Creating ReadRival database tables")
    print("=" * 40)
    print(f"Environment: {settings.ENVIRONMENT}")
    print(f"Database: {settings.DATABASE_URL[:50]}...")
    print()

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            print("Database connection successful")

        init_db()

        table_names = sorted(inspect(engine).get_table_names())
        print(f"Successfully created {len(table_names)} tables:")
        for table in table_names:
            print(f"  - {table}")
        return True

    except SQLAlchemyError as e:
        print(f"Database error: {str(e)}")
        return False


def main():
    """Main function."""
    if create_all_tables():
        sys.exit(0)
    print("\nTable creation failed!")
    sys.exit(1)


if __name__ == "__main__":
    main()
