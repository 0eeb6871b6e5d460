#!/usr/bin/env python3
"""
Create the admin credential and session tables directly from the SQLModel models.
This is a manual alternative to using Alembic, useful for local SQLite setups.
"""

import asyncio
import logging
import sys

from sqlmodel import SQLModel

from petition_admin.core.logging import setup_logging
from petition_admin.db import AdminCredential, AdminSession  # noqa: F401 - register tables
from petition_admin.db.database_async import close_db_engine, create_db_engine

setup_logging()
logger = logging.getLogger(__name__)


async def create_tables() -> bool:
    """Create all tables defined in SQLModel models."""
    try:
        engine = await create_db_engine()
    except Exception as e:
        logger.error(f"Failed to create database engine. Check your environment variables: {e}")
        return False

    try:
        async with engine.begin() as conn:
            logger.info("Creating tables from SQLModel definitions...")
            await conn.run_sync(SQLModel.metadata.create_all)

        logger.info("Tables created successfully!")
        return True
    except Exception as e:
        logger.error(f"Error creating tables: {e}")
        return False
    finally:
        await close_db_engine()


if __name__ == "__main__":
    success = asyncio.run(create_tables())
    sys.exit(0 if success else 1)
