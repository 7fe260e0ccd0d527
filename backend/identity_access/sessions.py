"""
Session resolution against the hosted auth service (Supabase Auth).

Why: Pages and APIs need "who is calling?" without owning user storage. The
browser holds only an opaque access token in an HTTP-only cookie; every
request asks the auth service to validate it.

Behavior:
- `resolve()` never raises: auth failures, network errors and empty tokens all
  collapse to `None`, which callers map to a sign-in redirect.
- A fresh client is built per call because the Supabase client keeps the last
  session in memory; sharing one across requests would leak identities.

Security: tokens and passwords are never logged, only exception class names.
"""
from __future__ import annotations

from typing import Any, Callable, Optional, Protocol
import logging
import os

from supabase import Client, ClientOptions, create_client

from .domain import AuthSession, AuthUser


logger = logging.getLogger("mali.identity_access")


class SessionResolverProtocol(Protocol):
    def resolve(self, access_token: Optional[str]) -> Optional[AuthUser]:
        ...

    def sign_in(self, *, email: str, password: str) -> Optional[AuthSession]:
        ...

    def confirm(
        self,
        *,
        code: Optional[str] = None,
        token_hash: Optional[str] = None,
        otp_type: Optional[str] = None,
    ) -> Optional[AuthSession]:
        ...


def _to_auth_user(raw: Any) -> Optional[AuthUser]:
    uid = getattr(raw, "id", None)
    if not uid:
        return None
    return AuthUser(id=str(uid), email=getattr(raw, "email", None))


def _to_auth_session(res: Any) -> Optional[AuthSession]:
    session = getattr(res, "session", None)
    user = _to_auth_user(getattr(res, "user", None) or getattr(session, "user", None))
    token = getattr(session, "access_token", None)
    if not token or user is None:
        return None
    expires_in = int(getattr(session, "expires_in", None) or 3600)
    return AuthSession(access_token=str(token), expires_in=expires_in, user=user)


class SupabaseSessionResolver:
    def __init__(
        self,
        url: str,
        anon_key: str,
        *,
        client_factory: Callable[..., Client] = create_client,
    ) -> None:
        self._url = url
        self._anon_key = anon_key
        self._client_factory = client_factory

    @classmethod
    def from_env(cls) -> "SupabaseSessionResolver":
        return cls(
            (os.getenv("SUPABASE_URL") or "").strip(),
            (os.getenv("SUPABASE_ANON_KEY") or "").strip(),
        )

    def _client(self) -> Client:
        options = ClientOptions(auto_refresh_token=False, persist_session=False)
        return self._client_factory(self._url, self._anon_key, options=options)

    def resolve(self, access_token: Optional[str]) -> Optional[AuthUser]:
        token = (access_token or "").strip()
        if not token:
            return None
        if not self._url or not self._anon_key:
            logger.warning("Session resolution skipped: SUPABASE_URL/SUPABASE_ANON_KEY not configured")
            return None
        try:
            res = self._client().auth.get_user(token)
        except Exception as exc:
            logger.warning("Auth get_user failed: %s", exc.__class__.__name__)
            return None
        if res is None:
            return None
        return _to_auth_user(getattr(res, "user", None))

    def sign_in(self, *, email: str, password: str) -> Optional[AuthSession]:
        if not self._url or not self._anon_key:
            logger.warning("Sign-in unavailable: SUPABASE_URL/SUPABASE_ANON_KEY not configured")
            return None
        try:
            res = self._client().auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            logger.info("Sign-in rejected: %s", exc.__class__.__name__)
            return None
        return _to_auth_session(res)

    def confirm(
        self,
        *,
        code: Optional[str] = None,
        token_hash: Optional[str] = None,
        otp_type: Optional[str] = None,
    ) -> Optional[AuthSession]:
        """Turn an emailed link (invite, signup, magic link) into a session.

        A PKCE `code` takes precedence over `token_hash`/`otp_type`; links
        carrying neither yield `None` without contacting the auth service.
        """
        if not code and not (token_hash and otp_type):
            return None
        if not self._url or not self._anon_key:
            logger.warning("Email confirmation unavailable: SUPABASE_URL/SUPABASE_ANON_KEY not configured")
            return None
        try:
            auth = self._client().auth
            if code:
                res = auth.exchange_code_for_session({"auth_code": code})
            else:
                res = auth.verify_otp({"token_hash": token_hash, "type": otp_type})
        except Exception as exc:
            logger.info("Email confirmation rejected: %s", exc.__class__.__name__)
            return None
        return _to_auth_session(res)


__all__ = ["SessionResolverProtocol", "SupabaseSessionResolver"]
