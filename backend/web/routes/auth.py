"""
Authentication-related FastAPI routes and the shared session accessor.

Why:
    The hosted auth service owns credentials; this router only exchanges a
    password for an access token once and keeps the token in an HTTP-only
    cookie. Invited users get their first token from the emailed link via
    `/auth/confirm`. Every other handler asks `current_user()` who is calling.

Notes:
    - `set_session_resolver()` lets tests swap in a fake resolver.
    - POSTs require a same-origin request (CSRF guard).
"""

from __future__ import annotations

from typing import Optional
import logging
import os

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from backend.identity_access.domain import ACCESS_TOKEN_COOKIE, AuthUser
from backend.identity_access.sessions import SessionResolverProtocol, SupabaseSessionResolver
from backend.web.auth_utils import cookie_opts, safe_next_path
from backend.web.components import Layout, SignInPage
from .security import is_same_origin


auth_router = APIRouter(tags=["Auth"])  # explicit paths, no prefix
logger = logging.getLogger("mali.web.auth")

_SESSION_RESOLVER: Optional[SessionResolverProtocol] = None


def get_session_resolver() -> SessionResolverProtocol:
    """Lazy accessor so importing the app performs no auth-service calls."""
    global _SESSION_RESOLVER
    if _SESSION_RESOLVER is None:
        _SESSION_RESOLVER = SupabaseSessionResolver.from_env()
    return _SESSION_RESOLVER


def set_session_resolver(resolver: Optional[SessionResolverProtocol]) -> None:
    """Allow tests to swap the resolver; None restores the env-configured default."""
    global _SESSION_RESOLVER
    _SESSION_RESOLVER = resolver


def access_token_from(request: Request) -> Optional[str]:
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


def current_user(request: Request) -> Optional[AuthUser]:
    """Resolve the caller once per request and memoize on request.state."""
    if hasattr(request.state, "auth_user"):
        return request.state.auth_user
    user = get_session_resolver().resolve(access_token_from(request))
    request.state.auth_user = user
    return user


def _environment() -> str:
    return os.getenv("MALI_ENV", "dev").lower()


def _set_access_cookie(response: Response, token: str, *, max_age: int) -> None:
    opts = cookie_opts(_environment())
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=token,
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
        path="/",
        max_age=max_age,
    )


def _sign_in_page(request: Request, *, next_path: str, error: str | None = None, email: str = "", status_code: int = 200) -> HTMLResponse:
    page = SignInPage(next_path=next_path, error=error, email=email)
    layout = Layout(title="Sign in", content=page.render(), user=None, current_path=request.url.path)
    return HTMLResponse(layout.render(), status_code=status_code, headers={"Cache-Control": "private, no-store"})


@auth_router.get("/sign-in", response_class=HTMLResponse)
async def sign_in_form(request: Request, next: str | None = None):
    return _sign_in_page(request, next_path=safe_next_path(next))


@auth_router.post("/sign-in")
async def sign_in_submit(request: Request):
    """Exchange email/password for an access token cookie.

    Behavior:
        - 403 JSON when the request is cross-origin.
        - 400 (form re-rendered) when email or password is missing.
        - 401 (form re-rendered) when the auth service rejects the credentials.
        - 302 to the sanitized `next` path on success.
    """
    if not is_same_origin(request):
        return JSONResponse({"error": "csrf_violation"}, status_code=403, headers={"Cache-Control": "private, no-store"})
    form = await request.form()
    email = str(form.get("email") or "").strip()
    password = str(form.get("password") or "")
    next_path = safe_next_path(str(form.get("next") or ""))
    if not email or not password:
        return _sign_in_page(request, next_path=next_path, error="Email and password are required.", email=email, status_code=400)

    session = get_session_resolver().sign_in(email=email, password=password)
    if session is None:
        return _sign_in_page(request, next_path=next_path, error="Invalid email or password.", email=email, status_code=401)

    logger.info("User %s signed in", session.user.id)
    response = RedirectResponse(url=next_path, status_code=302)
    _set_access_cookie(response, session.access_token, max_age=session.expires_in)
    return response


@auth_router.get("/auth/confirm")
async def confirm_email_link(
    request: Request,
    code: str | None = None,
    token_hash: str | None = None,
    type: str | None = None,
    next: str | None = None,
):
    """Landing target for invite and confirmation emails.

    Invited users have no password yet, so the emailed `token_hash`/`type`
    (or PKCE `code`) is exchanged for a session here. Failure sends the user
    to the sign-in form without setting a cookie.
    """
    session = get_session_resolver().confirm(code=code, token_hash=token_hash, otp_type=type)
    if session is None:
        logger.info("Email confirmation failed (type=%s)", type or "code")
        return RedirectResponse(url="/sign-in", status_code=302, headers={"Cache-Control": "private, no-store"})
    logger.info("User %s confirmed via email link", session.user.id)
    response = RedirectResponse(url=safe_next_path(next), status_code=302, headers={"Cache-Control": "private, no-store"})
    _set_access_cookie(response, session.access_token, max_age=session.expires_in)
    return response


@auth_router.post("/sign-out")
async def sign_out(request: Request):
    if not is_same_origin(request):
        return JSONResponse({"error": "csrf_violation"}, status_code=403, headers={"Cache-Control": "private, no-store"})
    response = RedirectResponse(url="/sign-in", status_code=302)
    opts = cookie_opts(_environment())
    response.delete_cookie(ACCESS_TOKEN_COOKIE, path="/", secure=opts["secure"], httponly=True, samesite=opts["samesite"])
    return response
