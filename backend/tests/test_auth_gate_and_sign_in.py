"""
Auth gate middleware plus the sign-in / sign-out routes.
"""
from __future__ import annotations

import httpx
import pytest
from httpx import ASGITransport

from backend.identity_access.domain import ACCESS_TOKEN_COOKIE
from backend.web import main


pytestmark = pytest.mark.anyio


def _client(token: str | None = None) -> httpx.AsyncClient:
    cookies = {ACCESS_TOKEN_COOKIE: token} if token else None
    return httpx.AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test", cookies=cookies)


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/", "/sign-in?next=/"),
        ("/dashboard/classes", "/sign-in?next=/dashboard/classes"),
        ("/dashboard/planning", "/sign-in?next=/dashboard/planning"),
    ],
)
async def test_protected_paths_require_cookie(path, expected):
    async with _client() as client:
        resp = await client.get(path, follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == expected


async def test_htmx_requests_get_401_with_hx_redirect():
    async with _client() as client:
        resp = await client.get("/dashboard/classes", headers={"HX-Request": "true"})
    assert resp.status_code == 401
    assert resp.headers["HX-Redirect"] == "/sign-in?next=/dashboard/classes"


async def test_public_paths_skip_the_gate():
    async with _client() as client:
        health = await client.get("/health")
        sign_in = await client.get("/sign-in")
    assert health.status_code == 200
    assert health.json() == {"status": "healthy"}
    assert sign_in.status_code == 200
    assert 'name="password"' in sign_in.text


async def test_signed_in_user_is_sent_home_from_sign_in(sessions):
    sessions.add_user("tok", "teacher-1")
    async with _client("tok") as client:
        resp = await client.get("/sign-in", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/"


async def test_stale_cookie_still_sees_sign_in_form(sessions):
    async with _client("stale") as client:
        resp = await client.get("/sign-in", follow_redirects=False)
    assert resp.status_code == 200


async def test_sign_in_form_keeps_safe_next_only():
    async with _client() as client:
        ok = await client.get("/sign-in?next=/dashboard/grading")
        evil = await client.get("/sign-in?next=//evil.example/x")
    assert 'name="next" value="/dashboard/grading"' in ok.text
    assert 'name="next" value="/"' in evil.text


async def test_sign_in_sets_cookie_and_redirects_to_next(sessions):
    sessions.add_user("tok-1", "teacher-1", email="t1@school.example", password="s3cret")
    async with _client() as client:
        resp = await client.post(
            "/sign-in",
            data={"email": "t1@school.example", "password": "s3cret", "next": "/dashboard/grading"},
            follow_redirects=False,
        )
    assert resp.status_code == 302
    assert resp.headers["location"] == "/dashboard/grading"
    set_cookie = resp.headers.get("set-cookie", "")
    assert f"{ACCESS_TOKEN_COOKIE}=tok-1" in set_cookie
    assert "HttpOnly" in set_cookie
    assert "samesite=lax" in set_cookie.lower()


async def test_sign_in_cookie_is_secure_in_prod(sessions, monkeypatch):
    monkeypatch.setenv("MALI_ENV", "prod")
    sessions.add_user("tok-1", "teacher-1", email="t1@school.example", password="s3cret")
    async with _client() as client:
        resp = await client.post("/sign-in", data={"email": "t1@school.example", "password": "s3cret"}, follow_redirects=False)
    assert resp.headers["location"] == "/"
    assert "Secure" in resp.headers.get("set-cookie", "")


async def test_sign_in_rejects_bad_credentials(sessions):
    sessions.add_user("tok-1", "teacher-1", email="t1@school.example", password="s3cret")
    async with _client() as client:
        resp = await client.post("/sign-in", data={"email": "t1@school.example", "password": "nope"}, follow_redirects=False)
    assert resp.status_code == 401
    assert "Invalid email or password." in resp.text
    assert "set-cookie" not in resp.headers


async def test_sign_in_requires_both_fields():
    async with _client() as client:
        resp = await client.post("/sign-in", data={"email": "t1@school.example"}, follow_redirects=False)
    assert resp.status_code == 400


async def test_sign_in_rejects_cross_origin_post(sessions):
    sessions.add_user("tok-1", "teacher-1", email="t1@school.example", password="s3cret")
    async with _client() as client:
        resp = await client.post(
            "/sign-in",
            data={"email": "t1@school.example", "password": "s3cret"},
            headers={"Origin": "http://evil.example"},
            follow_redirects=False,
        )
    assert resp.status_code == 403
    assert resp.json() == {"error": "csrf_violation"}


async def test_sign_out_clears_cookie():
    async with _client("tok") as client:
        resp = await client.post("/sign-out", headers={"Origin": "http://test"}, follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/sign-in"
    set_cookie = resp.headers.get("set-cookie", "")
    assert f"{ACCESS_TOKEN_COOKIE}=" in set_cookie
    assert "Max-Age=0" in set_cookie


async def test_security_headers_present():
    async with _client() as client:
        resp = await client.get("/health")
    assert resp.headers.get("X-Frame-Options") == "SAMEORIGIN"
    assert resp.headers.get("X-Content-Type-Options") == "nosniff"
    assert "default-src 'self'" in resp.headers.get("Content-Security-Policy", "")
