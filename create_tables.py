#!/usr/bin/env python3
"""
Script to create the telemetry tables for local development.
"""
import asyncio
import logging

from logviewer.core.logging_config import configure_logging
from logviewer.database.session import close_db, init_db

logger = logging.getLogger(__name__)


async def create_tables():
    """Create all database tables."""
    try:
        await init_db()
        logger.info("Tables created successfully")
    except Exception as e:
        logger.error(f"Error creating tables: {e}")
        raise
    finally:
        await close_db()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(create_tables())
