#!/usr/bin/env python3
"""
Initialize the Lending Ledger database.

This script:
1. Creates all database tables
2. Verifies the expected tables exist

Usage:
    python scripts/init_database.py [--drop-existing] [--database-url URL]
"""

import argparse
import logging
import sys

from sqlalchemy import inspect

from lending_ledger.database import get_db_manager

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

EXPECTED_TABLES = {"authors", "books", "members", "transactions"}


def main():
    """Main entry point for database initialization."""
    parser = argparse.ArgumentParser(description="Initialize the Lending Ledger database")
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating new ones",
    )
    parser.add_argument(
        "--database-url",
        help="Override the configured database URL",
    )

    args = parser.parse_args()

    db_manager = get_db_manager(args.database_url)

    if not db_manager.verify_connection():
        logger.error("Failed to connect to database")
        sys.exit(1)

    try:
        db_manager.init_database(drop_existing=args.drop_existing)

        tables = set(inspect(db_manager.engine).get_table_names())
        logger.info("Tables present: %s", ", ".join(sorted(tables)))

        missing_tables = EXPECTED_TABLES - tables
        if missing_tables:
            logger.error("Missing expected tables: %s", missing_tables)
            sys.exit(1)

        logger.info("Database initialization complete")

    except Exception:
        logger.exception("Database initialization failed")
        sys.exit(1)
    finally:
        db_manager.close()


if __name__ == "__main__":
    main()
