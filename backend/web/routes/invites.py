"""
Invite-user API: team owners invite a colleague by email.

Why:
    Inviting requires the service-role admin client, which must stay on the
    server. Browsers call this endpoint cross-origin with the caller's access
    token; we authenticate the caller, check team ownership, then perform the
    invite with admin privileges.

Permissions:
    Caller must present `Authorization: Bearer <access token>` and own the
    target team (`team_members.role = 'owner'`).
"""
from __future__ import annotations

from typing import Any
import json
import logging
import os

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from backend.identity_access.admin_client import get_admin_client
from backend.web.cors import CORS_HEADERS
from .auth import get_session_resolver
from .dashboard import get_repo


invites_router = APIRouter(tags=["Invites"])
logger = logging.getLogger("mali.web.invites")


def _json(body: dict, *, status_code: int) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=dict(CORS_HEADERS))


def _parse_team_id(raw: Any) -> int | None:
    """Team ids are integers; numbers must be integral, strings fully numeric.

    Stricter than a prefix parse: "12abc" is rejected rather than read as 12.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    if isinstance(raw, str):
        try:
            return int(raw.strip(), 10)
        except ValueError:
            return None
    return None


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization") or ""
    if not header:
        return None
    token = header[7:] if header.lower().startswith("bearer ") else header
    return token.strip() or None


def _invite_redirect_url(request: Request) -> str:
    configured = (os.getenv("INVITE_REDIRECT_URL") or "").strip()
    if configured:
        return configured
    return str(request.base_url).rstrip("/") + "/auth/confirm"


@invites_router.options("/api/invite-user")
async def invite_user_preflight():
    return PlainTextResponse("ok", headers=dict(CORS_HEADERS))


@invites_router.post("/api/invite-user")
async def invite_user(request: Request):
    """Invite `email` to team `teamId`.

    Request body: `{"email": str, "teamId": int | numeric str}`

    Responses:
        200 invite sent; 400 malformed body; 401 missing/invalid token;
        403 caller is not a team owner; 409 user already registered;
        500 ownership lookup or invite failed.
    """
    try:
        body = json.loads(await request.body())
    except ValueError:
        return _json({"error": "Bad Request: Could not parse JSON body"}, status_code=400)
    if not isinstance(body, dict):
        return _json({"error": "Bad Request: Could not parse JSON body"}, status_code=400)

    team_id = _parse_team_id(body.get("teamId"))
    if team_id is None:
        return _json({"error": "Bad Request: teamId is invalid or missing"}, status_code=400)
    email = str(body.get("email") or "").strip()
    if not email or not team_id:
        return _json({"error": "Missing required fields: email and teamId"}, status_code=400)

    token = _bearer_token(request)
    if not token:
        return _json({"error": "Missing Authorization header"}, status_code=401)
    inviter = get_session_resolver().resolve(token)
    if inviter is None:
        return _json({"error": "Invalid token or user not found"}, status_code=401)

    try:
        is_owner = get_repo().is_team_owner(user_id=inviter.id, team_id=team_id)
    except Exception as exc:
        logger.error("Team ownership check for team %s failed: %s", team_id, exc.__class__.__name__)
        return _json({"error": "Database error checking permissions"}, status_code=500)
    if not is_owner:
        logger.warning("User %s attempted to invite to team %s but is not an owner", inviter.id, team_id)
        return _json({"error": "Forbidden: You must be an owner to invite users to this team."}, status_code=403)

    logger.info("User %s is inviting a member to team %s", inviter.id, team_id)
    try:
        get_admin_client().auth.admin.invite_user_by_email(
            email, {"redirect_to": _invite_redirect_url(request)}
        )
    except Exception as exc:
        message = str(getattr(exc, "message", None) or exc)
        logger.warning("Invite to team %s failed: %s", team_id, exc.__class__.__name__)
        if "already registered" in message.lower() or "already been registered" in message.lower():
            return _json({"error": "User already registered", "details": message}, status_code=409)
        return _json({"error": "Failed to invite user", "details": message}, status_code=500)

    return _json({"message": f"Invite sent successfully to {email}"}, status_code=200)


@invites_router.api_route("/api/invite-user", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def invite_user_method_not_allowed():
    return JSONResponse(
        {"error": "Method Not Allowed"},
        status_code=405,
        headers={**CORS_HEADERS, "Allow": "POST, OPTIONS"},
    )
