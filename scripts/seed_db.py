#!/usr/bin/env python3
"""
AI Tool Directory - seed the database with demo data.

Inserts the roles, categories, tags, demo users and directory tools that are
missing; rows already present are left alone, so the script can be re-run.

Usage:
    # Seed an already migrated database
    python3 scripts/seed_db.py

    # Apply pending migrations first
    python3 scripts/seed_db.py --migrate

    # Report the migration state and exit
    python3 scripts/seed_db.py --status

    # Give the demo users another password
    python3 scripts/seed_db.py --password s3cret
"""

import argparse
import asyncio
import json
import sys

from app.db.migration_runner import check_migrations_status, run_migrations
from app.db.seed import DEFAULT_PASSWORD, seed_database
from app.db.session import close_engines, get_write_session_factory
from app.observability import get_logger, log_context, setup_logging

setup_logging()
logger = get_logger(__name__)


async def seed(password: str) -> None:
    factory = get_write_session_factory()
    try:
        async with factory() as session:
            await seed_database(session, password=password)
    finally:
        await close_engines()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Seed the AI Tool Directory database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Migrate and seed a fresh database
  python3 scripts/seed_db.py --migrate
        """,
    )
    parser.add_argument(
        "--migrate", action="store_true", help="Apply pending Alembic migrations before seeding"
    )
    parser.add_argument(
        "--status", action="store_true", help="Print the migration status and exit"
    )
    parser.add_argument(
        "--password",
        default=DEFAULT_PASSWORD,
        help=f"Password for the demo users (default: {DEFAULT_PASSWORD})",
    )

    args = parser.parse_args()

    if args.status:
        status = check_migrations_status()
        print(json.dumps(status, indent=2))
        sys.exit(1 if "error" in status else 0)

    try:
        with log_context(command="seed_db"):
            if args.migrate:
                run_migrations()
            asyncio.run(seed(args.password))
    except Exception as e:
        logger.error("seed_failed", error=str(e), exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
