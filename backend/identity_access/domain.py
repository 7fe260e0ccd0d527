"""
Identity domain types shared by the web layer and the teaching domain.

Why:
- The auth service owns user records; we only carry the minimal request-scoped
  identity (id + email) and never persist it.
- Cookie names live here so middleware and auth routes cannot drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

ACCESS_TOKEN_COOKIE = "mali_access_token"


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    expires_in: int
    user: AuthUser


__all__ = ["ACCESS_TOKEN_COOKIE", "AuthUser", "AuthSession"]
