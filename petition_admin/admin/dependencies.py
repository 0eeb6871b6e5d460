"""Dependencies for admin authentication."""

import secrets
from typing import Dict, Optional

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from petition_admin.admin.auth import admin_auth_service
from petition_admin.admin.results import AuthFailureReason
from petition_admin.admin.token_slot import CookieTokenSlot, TokenSlot
from petition_admin.core.dependencies import get_db_session, get_settings
from petition_admin.settings import Settings


def get_token_slot(request: Request, settings: Settings = Depends(get_settings)) -> CookieTokenSlot:
    """Session token slot backed by the admin session cookie."""
    return CookieTokenSlot(
        request,
        cookie_name=settings.get_admin_session_cookie_name(),
        max_age=settings.get_admin_session_hours() * 60 * 60,
    )


def _pending_cookie_headers(slot: TokenSlot) -> Optional[Dict[str, str]]:
    """Cookie update the slot still owes the browser, as error response headers."""
    if not isinstance(slot, CookieTokenSlot) or not slot.dirty:
        return None
    carrier = slot.apply(Response())
    return {"set-cookie": carrier.headers["set-cookie"]}


async def get_current_admin(
    slot: CookieTokenSlot = Depends(get_token_slot),
    db: AsyncSession = Depends(get_db_session),
) -> str:
    """Return the session token of the authenticated admin, or fail with 401.

    A rejected token is also deleted from the browser.
    """
    result = await admin_auth_service.validate_session(db, slot)
    if result:
        return result.token  # type: ignore[return-value]

    if result.reason == AuthFailureReason.STORE_UNAVAILABLE:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication is temporarily unavailable",
        )
    if result.reason == AuthFailureReason.NO_TOKEN:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired session",
        headers=_pending_cookie_headers(slot),
    )


class CSRFProtection:
    """CSRF protection for forms (double-submit cookie)."""

    def __init__(self):
        self.token_name = "csrf_token"

    async def generate_token(self) -> str:
        """Generate CSRF token."""
        return secrets.token_urlsafe(32)

    def is_valid(self, request: Request, submitted: str) -> bool:
        """Check the submitted form token against the CSRF cookie."""
        cookie_token = request.cookies.get(self.token_name)
        if not cookie_token or not submitted:
            return False
        return secrets.compare_digest(cookie_token.encode("utf-8"), submitted.encode("utf-8"))


csrf_protection = CSRFProtection()
