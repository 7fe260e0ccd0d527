"""
Supabase admin client (service role) for privileged server-side operations.

Design:
- One client per process, built on first use behind a lock and read-only
  afterwards. There is no teardown; the handle lives as long as the process.
- Session persistence and token auto-refresh are disabled: the client performs
  one-shot admin calls and never represents an interactive user.

Security:
- The service role key bypasses Row Level Security. It must never be sent to
  a browser, rendered into templates or logged.
- Missing configuration is a startup error (see `web.config`), not a
  per-request failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
import threading

from supabase import Client, ClientOptions, create_client


class AdminClientConfigError(RuntimeError):
    """Raised when the admin client cannot be configured from the environment."""


@dataclass(frozen=True)
class AdminClientConfig:
    url: str
    service_role_key: str

    def __repr__(self) -> str:  # keep the key out of tracebacks and logs
        return f"AdminClientConfig(url={self.url!r}, service_role_key='***')"

    @classmethod
    def from_env(cls) -> "AdminClientConfig":
        url = (os.getenv("SUPABASE_URL") or "").strip()
        key = (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip()
        if not url:
            raise AdminClientConfigError("Missing env.SUPABASE_URL")
        if not key:
            raise AdminClientConfigError("Missing env.SUPABASE_SERVICE_ROLE_KEY")
        return cls(url=url, service_role_key=key)


def create_admin_client(config: AdminClientConfig | None = None) -> Client:
    """Build a new service-role client. Prefer `get_admin_client()` in app code."""
    cfg = config or AdminClientConfig.from_env()
    options = ClientOptions(auto_refresh_token=False, persist_session=False)
    return create_client(cfg.url, cfg.service_role_key, options=options)


_INIT_LOCK = threading.Lock()


@lru_cache(maxsize=1)
def _shared_admin_client() -> Client:
    return create_admin_client()


def get_admin_client() -> Client:
    """Return the process-wide admin client, constructing it exactly once."""
    with _INIT_LOCK:
        return _shared_admin_client()


def reset_admin_client() -> None:
    """Drop the shared instance (tests only)."""
    with _INIT_LOCK:
        _shared_admin_client.cache_clear()


__all__ = [
    "AdminClientConfig",
    "AdminClientConfigError",
    "create_admin_client",
    "get_admin_client",
    "reset_admin_client",
]
