"""
Seed the configured database with an admin account, starter categories and
sample articles.

Uses the same backend selection as the API (Firebase, SQL or in-memory), so
set FIREBASE_DATABASE_URL or DATABASE_URL before running.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pastry_news.db import InMemoryDbClient
from pastry_news.dependencies import get_db_client
from pastry_news.seed import DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD, seed_database


logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed sample news data")
    parser.add_argument(
        "--admin-email",
        default=DEFAULT_ADMIN_EMAIL,
        help="Email for the admin account",
    )
    parser.add_argument(
        "--admin-password",
        default=DEFAULT_ADMIN_PASSWORD,
        help="Password for the admin account",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete existing articles, categories and users first",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    db = get_db_client()
    if isinstance(db, InMemoryDbClient):
        logger.warning("In-memory store selected; seeded data will not persist")

    created = seed_database(
        db,
        admin_email=args.admin_email,
        admin_password=args.admin_password,
        reset=args.reset,
    )
    logger.info(
        "Created %d users, %d categories, %d articles",
        created["users"],
        created["categories"],
        created["articles"],
    )
    logger.info("Admin login: %s", args.admin_email)
    return 0


if __name__ == "__main__":
    sys.exit(main())
