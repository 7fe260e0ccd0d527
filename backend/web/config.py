"""
Configuration and startup checks for the MALI Ed dashboard.

Why: The admin client needs the service role key, and a deployment without it
must not come up half-working. Production additionally refuses obviously
insecure settings; development stays permissive apart from the required keys.

Permissions: The caller needs no special privileges. The function simply reads
environment variables and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os

from backend.identity_access.admin_client import AdminClientConfig, AdminClientConfigError
from backend.teaching.repo_db import DSN_ENV_VARS, configured_dsn


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def ensure_secure_config_on_startup() -> None:
    """Fail fast on missing or insecure configuration.

    Checks (all environments):
    - SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set.

    Checks (prod/staging only):
    - Service role key must not be a known dummy placeholder.
    - SUPABASE_ANON_KEY must be set (sessions cannot be resolved otherwise).
    - SUPABASE_URL must use https.
    - A database DSN must be set; the in-memory class repo is for dev only.
    - The DSN in use must not explicitly disable TLS.
    """
    try:
        admin_cfg = AdminClientConfig.from_env()
    except AdminClientConfigError as exc:
        raise SystemExit(f"Refusing to start: {exc}") from exc

    env = os.getenv("MALI_ENV", "dev")
    if not _is_prod_like(env):
        return

    if admin_cfg.service_role_key.upper() in {"DUMMY_DO_NOT_USE", "CHANGE_ME"}:
        raise SystemExit(
            "Refusing to start: SUPABASE_SERVICE_ROLE_KEY is a dummy placeholder in production."
        )

    if not (os.getenv("SUPABASE_ANON_KEY") or "").strip():
        raise SystemExit("Refusing to start: SUPABASE_ANON_KEY is unset in production.")

    if not admin_cfg.url.lower().startswith("https://"):
        raise SystemExit("Refusing to start: SUPABASE_URL must use https in production.")

    dsn = configured_dsn()
    if not dsn:
        raise SystemExit(
            f"Refusing to start: no database DSN in production (set one of {', '.join(DSN_ENV_VARS)})."
        )
    if "sslmode=disable" in dsn:
        raise SystemExit(
            "Refusing to start: database DSN contains sslmode=disable in production. Use sslmode=require or verify TLS."
        )
