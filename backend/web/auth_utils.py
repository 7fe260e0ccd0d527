"""
Shared authentication utilities.

Design:
    Framework-agnostic and pure: callers pass the environment string and get
    back cookie flags, or pass a `next` candidate and get back a safe in-app
    path. Middleware and the auth router both use these.
"""

from __future__ import annotations

import re

# Disallow double slashes and path traversal (".."), allow dots in names
INAPP_PATH_PATTERN = re.compile(r"^(?!.*//)(?!.*\.\.)/[A-Za-z0-9._\-/]*$")
MAX_INAPP_REDIRECT_LEN = 256


def cookie_opts(environment: str) -> dict:
    """Return hardened cookie flags.

    Returns a mapping with keys:
      - secure: False only in explicit local dev over plain http
      - samesite: "lax"  # sent on top-level navigations back into the app
    """
    secure = (environment or "").lower() not in {"dev", "local"}
    return {"secure": secure, "samesite": "lax"}


def safe_next_path(candidate: str | None, default: str = "/") -> str:
    """Return `candidate` when it is a same-app absolute path, else `default`."""
    value = (candidate or "").strip()
    if not value or len(value) > MAX_INAPP_REDIRECT_LEN:
        return default
    if not INAPP_PATH_PATTERN.match(value):
        return default
    return value
