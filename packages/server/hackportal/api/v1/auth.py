"""
Session endpoints.

Sign-in itself happens against the hosted auth provider; these endpoints only
report the current session and manage the cookies this API owns.

GET  /auth/session  - Current user (401 without a valid session)
GET  /auth/csrf     - Issue the CSRF cookie for the double-submit check
POST /auth/logout   - Clear session, org selection and CSRF cookies
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request, Response

from hackportal.api.errors import ActionFailed
from hackportal.core.auth import generate_csrf_token, get_session_user
from hackportal.core.config import get_settings
from hackportal.core.results import auth_required
from hackportal_shared.schemas.organizations import SessionUserRead

log = structlog.get_logger()
settings = get_settings()

router = APIRouter()


@router.get("/session", response_model=SessionUserRead)
async def get_session_endpoint(request: Request):
    """Return the authenticated user."""
    user = get_session_user(request)
    if user is None:
        raise ActionFailed(auth_required())
    return SessionUserRead(id=user.id, email=user.email)


@router.get("/csrf")
async def issue_csrf_token(response: Response):
    """Issue a CSRF token; browsers echo it back in ``X-CSRF-Token``."""
    token = generate_csrf_token()
    response.set_cookie(
        settings.csrf_cookie_name,
        token,
        httponly=False,
        secure=True,
        samesite="lax",
        path="/",
    )
    return {"csrf_token": token}


@router.post("/logout")
async def logout(request: Request, response: Response):
    """Forget the session and the selected organization."""
    user = get_session_user(request)
    for name in (settings.session_cookie_name, settings.org_cookie_name, settings.csrf_cookie_name):
        response.delete_cookie(name, path="/")
    log.info("auth.logout", user_id=str(user.id) if user else None)
    return {"ok": True}
