#!/usr/bin/env python
"""Forget the stored admin password and end the current admin session.

The next password submitted on the login page becomes the new admin password.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from petition_admin.admin.auth import admin_auth_service
from petition_admin.admin.crud.admin_auth import admin_session_crud
from petition_admin.admin.token_slot import MemoryTokenSlot
from petition_admin.core.logging import setup_logging
from petition_admin.db.database_async import close_db_engine, create_db_engine, get_db_session

setup_logging()
logger = logging.getLogger(__name__)


async def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Reset the petition admin password.")
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Do not ask for confirmation.",
    )
    args = parser.parse_args(argv)

    if not args.yes:
        answer = input("This clears the admin password and logs the admin out. Continue? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            logger.info("Aborted.")
            return 1

    try:
        await create_db_engine()
    except Exception as e:
        logger.error(f"Failed to create database engine. Aborting: {e}")
        return 1

    try:
        async with get_db_session() as session:
            # There is no browser slot here; point the logout at whatever session is live
            live = await admin_session_crud.list_all(session)
            slot = MemoryTokenSlot(live[0].session_token if live else None)

            result = await admin_auth_service.reset_admin_password(session, slot)
            if not result:
                logger.error(f"Admin password reset failed: {result.reason.value}")  # type: ignore[union-attr]
                return 1

        logger.info("Admin password cleared. The next login sets a new password.")
        return 0
    finally:
        await close_db_engine()
        logger.info("Database engine closed.")


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
