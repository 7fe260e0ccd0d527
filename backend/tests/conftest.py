"""
Pytest configuration for backend tests.

Why:
    The app refuses to import without Supabase admin configuration, so safe
    placeholder values are exported before any test module imports `main`.
    AnyIO is pinned to the asyncio backend.
"""
import os
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
TESTS_DIR = REPO_ROOT / "backend" / "tests"
for p in (str(REPO_ROOT), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)

os.environ.setdefault("SUPABASE_URL", "http://supabase.test:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "TEST_ONLY_SERVICE_ROLE")
os.environ.setdefault("SUPABASE_ANON_KEY", "TEST_ONLY_ANON")

from fakes import FakeSessionResolver, RecordingRepo  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sessions() -> FakeSessionResolver:
    return FakeSessionResolver()


@pytest.fixture
def repo() -> RecordingRepo:
    return RecordingRepo()


@pytest.fixture(autouse=True)
def _wire_fakes(sessions: FakeSessionResolver, repo: RecordingRepo):
    """Install fresh auth/repo doubles per test and restore defaults afterwards.

    Why:
        Routes resolve both through module-level accessors; a leftover fake
        from one test would otherwise leak identities into the next.
    """
    from backend.identity_access.admin_client import reset_admin_client
    from backend.web.routes import auth, dashboard

    auth.set_session_resolver(sessions)
    dashboard.set_repo(repo)
    reset_admin_client()
    yield
    auth.set_session_resolver(None)
    dashboard.set_repo(None)
    reset_admin_client()


@pytest.fixture(autouse=True)
def _clear_env_toggles(monkeypatch: pytest.MonkeyPatch):
    for var in ("MALI_ENV", "MALI_TRUST_PROXY", "INVITE_REDIRECT_URL"):
        monkeypatch.delenv(var, raising=False)
    yield
