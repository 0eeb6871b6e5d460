"""Admin router for authentication and session management."""

import os
from typing import Annotated, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from petition_admin.admin.auth import admin_auth_service
from petition_admin.admin.dependencies import csrf_protection, get_current_admin, get_token_slot
from petition_admin.admin.results import AuthFailureReason
from petition_admin.admin.token_slot import CookieTokenSlot
from petition_admin.core.dependencies import get_db_session, get_settings
from petition_admin.settings import Settings

# Template directory setup
templates_dir = os.path.join(os.path.dirname(__file__), "templates")
templates = Jinja2Templates(directory=templates_dir)

router = APIRouter(prefix="/admin", tags=["admin"])

# Message and status code shown on the login page for each failed login
LOGIN_FAILURES: Dict[AuthFailureReason, Tuple[str, int]] = {
    AuthFailureReason.INPUT_REJECTED: ("Please enter a password", status.HTTP_400_BAD_REQUEST),
    AuthFailureReason.INVALID_PASSWORD: ("Invalid password", status.HTTP_401_UNAUTHORIZED),
    AuthFailureReason.STORE_UNAVAILABLE: (
        "Authentication is temporarily unavailable. Please try again.",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    ),
}


async def _render_with_csrf(
    request: Request,
    template: str,
    context: dict,
    status_code: int = 200,
) -> HTMLResponse:
    """Render a form page with a fresh CSRF token in both the page and a cookie."""
    csrf_token = await csrf_protection.generate_token()
    response = templates.TemplateResponse(
        request,
        template,
        {**context, "csrf_token": csrf_token},
        status_code=status_code,
    )
    response.set_cookie(
        key=csrf_protection.token_name,
        value=csrf_token,
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="strict",
    )
    return response


async def _render_login(
    request: Request,
    db: AsyncSession,
    error: Optional[str] = None,
    status_code: int = 200,
) -> HTMLResponse:
    password_set = await admin_auth_service.is_password_set(db)
    return await _render_with_csrf(
        request,
        "login.html",
        {"password_set": password_set, "error": error},
        status_code=status_code,
    )


@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> HTMLResponse:
    """Display login page.

    Before any password has been stored the page asks the admin to choose one.
    """
    return await _render_login(request, db)


@router.post("/login", response_model=None)
async def login(
    request: Request,
    password: Annotated[str, Form()] = "",
    csrf_token: Annotated[str, Form(alias="csrf_token")] = "",
    slot: CookieTokenSlot = Depends(get_token_slot),
    db: AsyncSession = Depends(get_db_session),
):
    """Handle login form submission."""
    if not csrf_protection.is_valid(request, csrf_token):
        return await _render_login(
            request,
            db,
            error="Invalid request. Please try again.",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    result = await admin_auth_service.authenticate_admin(db, password, slot)
    if not result:
        message, status_code = LOGIN_FAILURES.get(
            result.reason,  # type: ignore[arg-type]
            ("Invalid password", status.HTTP_401_UNAUTHORIZED),
        )
        return await _render_login(request, db, error=message, status_code=status_code)

    redirect = RedirectResponse(url="/admin/", status_code=303)
    slot.apply(redirect)
    redirect.delete_cookie(key=csrf_protection.token_name)
    return redirect


@router.get("/logout")
async def logout(
    slot: CookieTokenSlot = Depends(get_token_slot),
    db: AsyncSession = Depends(get_db_session),
):
    """Logout and redirect to login page."""
    await admin_auth_service.logout_admin(db, slot)

    redirect = RedirectResponse(url="/admin/login", status_code=303)
    slot.apply(redirect)
    return redirect


@router.get("/", response_class=HTMLResponse)
async def admin_home(
    request: Request,
    current_admin: Annotated[str, Depends(get_current_admin)],
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    """Admin dashboard hub."""
    return await _render_with_csrf(
        request,
        "dashboard.html",
        {"session_hours": settings.get_admin_session_hours()},
    )


@router.post("/reset-password", response_model=None)
async def reset_password(
    request: Request,
    current_admin: Annotated[str, Depends(get_current_admin)],
    csrf_token: Annotated[str, Form(alias="csrf_token")] = "",
    slot: CookieTokenSlot = Depends(get_token_slot),
    db: AsyncSession = Depends(get_db_session),
):
    """Forget the admin password; the next login chooses a new one."""
    if not csrf_protection.is_valid(request, csrf_token):
        raise HTTPException(status_code=400, detail="Invalid request")

    result = await admin_auth_service.reset_admin_password(db, slot)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Password reset failed. Please try again.",
        )

    redirect = RedirectResponse(url="/admin/login", status_code=303)
    slot.apply(redirect)
    redirect.delete_cookie(key=csrf_protection.token_name)
    return redirect


@router.post("/sessions/cleanup")
async def cleanup_sessions(
    current_admin: Annotated[str, Depends(get_current_admin)],
    db: AsyncSession = Depends(get_db_session),
) -> dict:
    """Delete expired admin sessions."""
    deleted = await admin_auth_service.cleanup_expired_sessions(db)
    return {"deleted": deleted}
