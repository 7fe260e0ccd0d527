"MALI Ed dashboard"
from __future__ import annotations

from pathlib import Path
import logging
import os
import sys

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from backend.identity_access.domain import ACCESS_TOKEN_COOKIE
from backend.web import config as _cfg
from backend.web.auth_utils import safe_next_path
from backend.web.components import HomePage, Layout
from backend.web.routes.auth import auth_router, current_user
from backend.web.routes.dashboard import dashboard_router
from backend.web.routes.invites import invites_router


def _under_pytest() -> bool:
    return "pytest" in sys.modules or bool(os.getenv("PYTEST_CURRENT_TEST"))


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via MALI_ENABLE_DOTENV (default true outside pytest).
    """
    if _under_pytest():
        return False
    flag = (os.getenv("MALI_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    from dotenv import load_dotenv

    load_dotenv()

# Fail fast before serving anything: the admin client config is mandatory.
_cfg.ensure_secure_config_on_startup()

# --- App & Settings Setup -------------------------------------------------------


class Settings:
    def __init__(self) -> None:
        self._env_override: str | None = None

    @property
    def environment(self) -> str:
        if self._env_override is not None:
            return self._env_override
        return os.getenv("MALI_ENV", "dev").lower()

    def override_environment(self, env: str | None) -> None:
        """Override environment for tests (e.g., "prod"), or reset with None."""
        self._env_override = env


logger = logging.getLogger("mali.web")
SETTINGS = Settings()

app = FastAPI(title="MALI Ed", description="Teacher dashboard", version="0.1.0")

static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(invites_router)

# --- Auth Gate Middleware -------------------------------------------------------

_PUBLIC_PREFIXES = ("/static/", "/api/", "/auth/", "/sign-in", "/sign-out")
_PUBLIC_SUFFIXES = (".ico", ".svg")


def _is_public_path(path: str) -> bool:
    return path.startswith(_PUBLIC_PREFIXES) or path.endswith(_PUBLIC_SUFFIXES) or path == "/health"


def _is_protected_path(path: str) -> bool:
    return path == "/" or path == "/dashboard" or path.startswith("/dashboard/")


@app.middleware("http")
async def auth_gate(request: Request, call_next):
    """Coarse session gate in front of the page handlers.

    Only checks that a session cookie is present; handlers validate it. A
    signed-in user opening the sign-in form is sent home instead.
    """
    path = request.url.path
    has_cookie = bool(request.cookies.get(ACCESS_TOKEN_COOKIE))

    if path == "/sign-in" and request.method == "GET" and has_cookie:
        if current_user(request) is not None:
            return RedirectResponse(url="/", status_code=302)
        return await call_next(request)

    if _is_public_path(path):
        return await call_next(request)

    if _is_protected_path(path) and not has_cookie:
        target = f"/sign-in?next={safe_next_path(path)}"
        if "HX-Request" in request.headers:
            return JSONResponse(
                {"error": "unauthenticated"},
                status_code=401,
                headers={"HX-Redirect": target, "Cache-Control": "private, no-store"},
            )
        return RedirectResponse(url=target, status_code=302)

    return await call_next(request)


# --- Security Headers Middleware ----------------------------------------------


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    if SETTINGS.environment == "prod":
        csp = (
            "default-src 'self'; script-src 'self'; style-src 'self'; "
            "img-src 'self' data:; font-src 'self' data:; connect-src 'self';"
        )
    else:
        csp = (
            "default-src 'self'; script-src 'self' 'unsafe-inline'; style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; font-src 'self' data:; connect-src 'self';"
        )
    response.headers.setdefault("Content-Security-Policy", csp)
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    return response


# --- Pages ---------------------------------------------------------------------


@app.get("/", response_class=HTMLResponse)
async def home(request: Request):
    user = current_user(request)
    if user is None:
        return RedirectResponse(url="/sign-in", status_code=302)
    layout = Layout(
        title="Home",
        content=HomePage().render(),
        user=user,
        current_path=request.url.path,
        body_class="theme-dark",
    )
    return HTMLResponse(layout.render(), headers={"Cache-Control": "private, no-store"})


@app.get("/health")
async def health_check():
    # Security: include no-store to avoid caching any runtime status.
    return JSONResponse({"status": "healthy"}, headers={"Cache-Control": "private, no-store"})
