#!/usr/bin/env python
"""Delete expired admin sessions. Meant to run from cron, not on page loads."""

import asyncio
import logging
import sys

from petition_admin.admin.auth import admin_auth_service
from petition_admin.core.logging import setup_logging
from petition_admin.db.database_async import close_db_engine, create_db_engine, get_db_session

setup_logging()
logger = logging.getLogger(__name__)


async def main() -> int:
    try:
        await create_db_engine()
    except Exception as e:
        logger.error(f"Failed to create database engine. Aborting: {e}")
        return 1

    try:
        async with get_db_session() as session:
            deleted = await admin_auth_service.cleanup_expired_sessions(session)
        logger.info(f"Expired admin sessions removed: {deleted}")
        return 0
    finally:
        await close_db_engine()
        logger.info("Database engine closed.")


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
