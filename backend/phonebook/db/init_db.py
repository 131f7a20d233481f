"""
Database initialization and bootstrapping.
Run as `python -m phonebook.db.init_db` to create the schema ahead of the first start.
"""

import asyncio
import sys

from phonebook.core.config import settings
from phonebook.core.logging import get_logger, setup_logging
from phonebook.db.storage import StorageEngine

logger = get_logger(__name__)


async def create_tables(storage: StorageEngine) -> None:
    """
    Create all database tables and indexes.
    Safe to run repeatedly; existing tables are left untouched.
    """
    await storage.connect()
    await storage.create_schema()
    logger.info("Database tables initialized")


async def run_migrations(database_url: str = None) -> None:
    """Connect to the configured database, create the schema and disconnect."""
    storage = StorageEngine(database_url or settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    try:
        await create_tables(storage)
    finally:
        await storage.close()


def main() -> int:
    setup_logging()
    logger.info("Running database migrations", extra={"database_url": settings.DATABASE_URL})
    try:
        asyncio.run(run_migrations())
    except Exception:
        logger.exception("Database migrations failed")
        return 1
    logger.info("Database migrations finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())
