#!/usr/bin/env python3
"""
Refresh Leaderboard Snapshots Script

Recomputes every metric/period leaderboard and stores the snapshots.
Intended to run on a schedule (cron or similar).

Usage:
    python scripts/refresh_leaderboards.py [genre ...]
"""

import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from readrival.core.database import SessionLocal
from readrival.services.ranking_service import ranking_service

logger = logging.getLogger(__name__)


def refresh(genres) -> bool:
    db = SessionLocal()
    try:
        refreshed = ranking_service.refresh_all(db, genres=genres)
        print(f"Refreshed {refreshed} leaderboards")
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Leaderboard refresh failed: {str(e)}")
        print(f"Database error: {str(e)}")
        return False
    finally:
        db.close()


def main():
    logging.basicConfig(level=logging.INFO)
    genres = [arg for arg in sys.argv[1:] if arg.strip()]
    sys.exit(0 if refresh(genres) else 1)


if __name__ == "__main__":
    main()
