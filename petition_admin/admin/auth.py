"""Authentication logic for the admin area.

There is one admin and one password. The first password ever submitted to
``authenticate_admin`` becomes that password; ``reset_admin_password`` clears it
so the next login sets a new one. Only one session is live at a time: every
successful login drops all existing sessions before issuing a new token.

None of the operations raise on store failures. They log the error and report
it through the returned ``AuthResult`` (or a ``False``/``0``/no-op for the
helpers), leaving retry and messaging to the caller.
"""

import hashlib
import hmac
import logging
import secrets
import time
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from petition_admin.admin.crud.admin_auth import admin_credential_crud, admin_session_crud
from petition_admin.admin.results import AuthFailureReason, AuthResult
from petition_admin.admin.token_slot import TokenSlot
from petition_admin.core.logging import mask_token
from petition_admin.models.admin_auth import PASSWORD_HASH_USER_ID
from petition_admin.settings import Settings

logger = logging.getLogger(__name__)

SESSION_TOKEN_BYTES = 32

# Errors that mean the session store could not be read or written
STORE_ERRORS = (SQLAlchemyError, OSError)


def hash_password(password: str) -> str:
    """Lowercase hex SHA-256 digest of the UTF-8 encoded password."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def generate_session_token(n_bytes: int = SESSION_TOKEN_BYTES) -> str:
    """Generate a cryptographically secure random token, hex encoded."""
    return secrets.token_hex(n_bytes)


class AdminAuthService:
    """Service for admin authentication operations."""

    def __init__(
        self,
        session_hours: Optional[int] = None,
        clock: Callable[[], float] = time.time,
        token_factory: Callable[[int], str] = generate_session_token,
    ) -> None:
        self._session_hours = session_hours
        self.clock = clock
        self.token_factory = token_factory

    @property
    def session_hours(self) -> int:
        if self._session_hours is not None:
            return self._session_hours
        return Settings().get_admin_session_hours()

    def now(self) -> int:
        """Current unix time in whole seconds."""
        return int(self.clock())

    @staticmethod
    def get_session_token(slot: TokenSlot) -> Optional[str]:
        """Token currently held by the client's slot."""
        return slot.get()

    async def _rollback(self, db: AsyncSession) -> None:
        try:
            await db.rollback()
        except STORE_ERRORS as e:
            logger.warning(f"Rollback after store failure also failed: {e}")

    async def is_password_set(self, db: AsyncSession) -> bool:
        """Check whether an admin password has been stored."""
        try:
            return await admin_credential_crud.get(db) is not None
        except STORE_ERRORS as e:
            logger.error(f"Failed to read stored password hash: {e}", exc_info=True)
            await self._rollback(db)
            return False

    async def authenticate_admin(self, db: AsyncSession, password: str, slot: TokenSlot) -> AuthResult:
        """Authenticate with the admin password and open a new session.

        If no password is stored yet, ``password`` is stored and the call succeeds
        (first-time setup). Otherwise it must match the stored digest. On success
        every existing session is dropped, a new one is issued and its token is
        written to ``slot``.
        """
        if not password or not password.strip():
            return AuthResult.failure(AuthFailureReason.INPUT_REJECTED)

        password_hash = hash_password(password)

        try:
            credential = await admin_credential_crud.get(db)
        except STORE_ERRORS as e:
            logger.error(f"Failed to read stored password hash: {e}", exc_info=True)
            await self._rollback(db)
            return AuthResult.failure(AuthFailureReason.STORE_UNAVAILABLE)

        if credential is None:
            try:
                await admin_credential_crud.replace(db, password_hash)
            except STORE_ERRORS as e:
                logger.error(f"Failed to store password hash: {e}", exc_info=True)
                await self._rollback(db)
                return AuthResult.failure(AuthFailureReason.STORE_UNAVAILABLE)
            logger.warning("No admin password was set; the submitted password is now the admin password.")
        elif not hmac.compare_digest(password_hash, credential.password_hash):
            logger.info("Admin login rejected: wrong password.")
            return AuthResult.failure(AuthFailureReason.INVALID_PASSWORD)

        session_token = self.token_factory(SESSION_TOKEN_BYTES)
        expires_at = self.now() + self.session_hours * 60 * 60

        try:
            removed = await admin_session_crud.delete_all(db)
            await admin_session_crud.create_session(db, session_token, expires_at)
        except STORE_ERRORS as e:
            # A freshly stored password stays stored; the next attempt verifies against it
            logger.error(f"Failed to create admin session: {e}", exc_info=True)
            await self._rollback(db)
            return AuthResult.failure(AuthFailureReason.STORE_UNAVAILABLE)

        slot.set(session_token)
        logger.info(f"Admin session {mask_token(session_token)} issued; {removed} previous session(s) dropped.")
        return AuthResult.success(session_token)

    async def validate_session(
        self, db: AsyncSession, slot: TokenSlot, session_token: Optional[str] = None
    ) -> AuthResult:
        """Check that a session token is known and not expired.

        Uses the token in ``slot`` when ``session_token`` is not given. Unknown and
        expired tokens are cleared from the slot; expired sessions are deleted.
        Validation does not extend the expiry.
        """
        token = session_token or slot.get()
        if not token:
            return AuthResult.failure(AuthFailureReason.NO_TOKEN)

        try:
            session = await admin_session_crud.get_by_token(db, token)
        except STORE_ERRORS as e:
            logger.error(f"Session validation failed: {e}", exc_info=True)
            await self._rollback(db)
            return AuthResult.failure(AuthFailureReason.STORE_UNAVAILABLE)

        if session is None or session.user_id == PASSWORD_HASH_USER_ID:
            slot.clear()
            return AuthResult.failure(AuthFailureReason.SESSION_NOT_FOUND)

        if session.is_expired(self.now()):
            try:
                await admin_session_crud.delete_by_id(db, session.id)
            except STORE_ERRORS as e:
                logger.error(f"Failed to delete expired session {mask_token(token)}: {e}", exc_info=True)
                await self._rollback(db)
            slot.clear()
            logger.info(f"Admin session {mask_token(token)} expired.")
            return AuthResult.failure(AuthFailureReason.SESSION_EXPIRED)

        return AuthResult.success(token)

    async def logout_admin(self, db: AsyncSession, slot: TokenSlot) -> None:
        """Delete the slot's session, if any, and always clear the slot."""
        token = slot.get()

        if token:
            try:
                await admin_session_crud.delete_by_token(db, token)
            except STORE_ERRORS as e:
                logger.error(f"Failed to delete session {mask_token(token)}: {e}", exc_info=True)
                await self._rollback(db)

        slot.clear()

    async def reset_admin_password(self, db: AsyncSession, slot: TokenSlot) -> AuthResult:
        """Forget the stored password and log out. The next login sets a new password."""
        try:
            removed = await admin_credential_crud.delete_all(db)
        except STORE_ERRORS as e:
            logger.error(f"Failed to reset admin password: {e}", exc_info=True)
            await self._rollback(db)
            return AuthResult.failure(AuthFailureReason.STORE_UNAVAILABLE)

        await self.logout_admin(db, slot)
        logger.warning(f"Admin password reset ({removed} stored hash(es) removed).")
        return AuthResult.success()

    async def cleanup_expired_sessions(self, db: AsyncSession) -> int:
        """Delete every expired session. Returns how many were deleted."""
        deleted = 0
        try:
            now = self.now()
            for session in await admin_session_crud.list_all(db):
                if session.user_id == PASSWORD_HASH_USER_ID:
                    continue
                if session.is_expired(now):
                    await admin_session_crud.delete_by_id(db, session.id)
                    deleted += 1
        except STORE_ERRORS as e:
            logger.error(f"Failed to cleanup expired sessions: {e}", exc_info=True)
            await self._rollback(db)
            return 0

        if deleted:
            logger.info(f"Cleaned up {deleted} expired admin session(s).")
        return deleted


admin_auth_service = AdminAuthService()
