"""
Dashboard routes: primary-class redirects, class selection and class pages.

Why:
    Teachers open "Grading" or "Planning" without picking a class first; the
    redirect routes land them on their primary class. When no primary class
    exists they are sent to the class list with an explanatory notice.

Permissions:
    All routes require a signed-in user. Class pages additionally require the
    user to be assigned to the class (404 otherwise, to avoid leaking ids).
"""
from __future__ import annotations

from typing import Optional
from uuid import UUID
import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from backend.teaching.class_redirect import SIGN_IN_PATH, Destination, resolve_class_redirect
from backend.teaching.repo import ClassTeacherRepoProtocol, InMemoryClassTeacherRepo
from backend.web.components import ClassLandingPage, ClassListPage, Layout
from .auth import access_token_from, current_user, get_session_resolver


dashboard_router = APIRouter(tags=["Dashboard"])
logger = logging.getLogger("mali.web")

try:
    from backend.teaching.repo_db import DBClassTeacherRepo
    _DB_REPO_IMPORT_ERROR: Optional[Exception] = None
except Exception as exc:  # pragma: no cover - psycopg missing in slim envs
    DBClassTeacherRepo = None  # type: ignore
    _DB_REPO_IMPORT_ERROR = exc


def _build_default_repo() -> ClassTeacherRepoProtocol:
    """Prefer the DB-backed repo; fall back to in-memory when unavailable."""
    if DBClassTeacherRepo is None:
        if _DB_REPO_IMPORT_ERROR:
            logger.warning("Class repo import failed: %s", _DB_REPO_IMPORT_ERROR)
        return InMemoryClassTeacherRepo()
    try:
        return DBClassTeacherRepo()
    except Exception as exc:
        logger.warning("Class repo unavailable (%s); using in-memory fallback", exc)
        return InMemoryClassTeacherRepo()


_REPO: Optional[ClassTeacherRepoProtocol] = None


def get_repo() -> ClassTeacherRepoProtocol:
    global _REPO
    if _REPO is None:
        _REPO = _build_default_repo()
    return _REPO


def set_repo(repo: Optional[ClassTeacherRepoProtocol]) -> None:
    """Allow tests to swap the class repository implementation."""
    global _REPO
    _REPO = repo


def _private_headers() -> dict:
    return {"Cache-Control": "private, no-store"}


def _redirect(location: str) -> RedirectResponse:
    return RedirectResponse(url=location, status_code=302, headers=_private_headers())


def _class_redirect(request: Request, destination: Destination) -> RedirectResponse:
    outcome = resolve_class_redirect(
        destination,
        access_token=access_token_from(request),
        sessions=get_session_resolver(),
        classes=get_repo(),
    )
    return _redirect(outcome.location)


@dashboard_router.get("/dashboard/grading")
async def grading_redirect(request: Request):
    """Redirect to the grading page of the caller's primary class."""
    return _class_redirect(request, Destination.GRADING)


@dashboard_router.get("/dashboard/planning")
async def planning_redirect(request: Request):
    """Redirect to the planning page of the caller's primary class."""
    return _class_redirect(request, Destination.PLANNING)


@dashboard_router.get("/dashboard/classes", response_class=HTMLResponse)
async def class_selection(request: Request, error: str | None = None):
    user = current_user(request)
    if user is None:
        return _redirect(SIGN_IN_PATH)
    classes = get_repo().list_classes_for_teacher(teacher_id=user.id)
    page = ClassListPage(classes, error=error)
    layout = Layout(title="Classes", content=page.render(), user=user, current_path=request.url.path)
    return HTMLResponse(layout.render(), headers=_private_headers())


def _class_page(request: Request, destination: Destination, class_id: str):
    user = current_user(request)
    if user is None:
        return _redirect(SIGN_IN_PATH)
    try:
        normalized = str(UUID(class_id))
    except ValueError:
        raise HTTPException(status_code=404, detail="not_found")
    cls = get_repo().get_class_for_teacher(teacher_id=user.id, class_id=normalized)
    if cls is None:
        raise HTTPException(status_code=404, detail="not_found")
    page = ClassLandingPage(destination.value, cls)
    layout = Layout(title=page.title, content=page.render(), user=user, current_path=request.url.path)
    return HTMLResponse(layout.render(), headers=_private_headers())


@dashboard_router.get("/dashboard/grading/{class_id}", response_class=HTMLResponse)
async def grading_class_page(request: Request, class_id: str):
    return _class_page(request, Destination.GRADING, class_id)


@dashboard_router.get("/dashboard/planning/{class_id}", response_class=HTMLResponse)
async def planning_class_page(request: Request, class_id: str):
    return _class_page(request, Destination.PLANNING, class_id)
