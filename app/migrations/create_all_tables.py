"""
Migration script to create all database tables

Run this script to create the movies, genres and ratings tables:
    python -m app.migrations.create_all_tables
"""

import asyncio
import logging

from app.database import DATABASE_URL, init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_tables():
    """Create all database tables"""
    logger.info("=" * 60)
    logger.info(f"Creating database tables on {DATABASE_URL.split('@')[-1]}")
    logger.info("=" * 60)

    asyncio.run(init_db())

    logger.info("✅ Tables ready: movies, genres, ratings")


if __name__ == "__main__":
    create_tables()
