"""
CORS header map for the invite-user function.
"""
from __future__ import annotations

import pytest

from backend.web.cors import CORS_HEADERS


def test_cors_headers_are_exact():
    assert dict(CORS_HEADERS) == {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
    }


def test_cors_headers_are_read_only():
    with pytest.raises(TypeError):
        CORS_HEADERS["Access-Control-Allow-Origin"] = "https://evil.example"  # type: ignore[index]
