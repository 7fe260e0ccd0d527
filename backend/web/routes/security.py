"""
Shared web security helpers for form-posting routes.

Contains the same-origin (CSRF) check used by sign-in and sign-out.
"""
from __future__ import annotations

import os
from urllib.parse import urlparse

from fastapi import Request


Origin = tuple[str, str, int]


def _default_port(scheme: str) -> int:
    return 443 if scheme == "https" else 80


def _parse_origin(url: str) -> Origin:
    p = urlparse(url)
    if not p.scheme or not p.hostname:
        raise ValueError("invalid_origin")
    scheme = p.scheme.lower()
    return scheme, p.hostname.lower(), int(p.port or _default_port(scheme))


def _first(value: str | None) -> str:
    return (value or "").split(",")[0].strip()


def _server_origin(request: Request) -> Origin:
    """Origin the browser sees for this app.

    X-Forwarded-* headers are honoured only with MALI_TRUST_PROXY=true.
    """
    trust_proxy = (os.getenv("MALI_TRUST_PROXY", "false") or "").lower() == "true"
    scheme = (request.url.scheme or "http").lower()
    host = (request.url.hostname or "").lower()
    port = int(request.url.port) if request.url.port else _default_port(scheme)
    if not trust_proxy:
        return scheme, host, port

    scheme = (_first(request.headers.get("x-forwarded-proto")) or scheme).lower()
    fwd_host = _first(request.headers.get("x-forwarded-host") or request.headers.get("host"))
    port = _default_port(scheme)
    if fwd_host:
        if ":" in fwd_host:
            fwd_host, port_str = fwd_host.rsplit(":", 1)
            port = int(port_str) if port_str.isdigit() else port
        host = fwd_host.lower()
    fwd_port = _first(request.headers.get("x-forwarded-port"))
    if fwd_port.isdigit():
        port = int(fwd_port)
    return scheme, host, port


def is_same_origin(request: Request) -> bool:
    """Verify same-origin using Origin, falling back to Referer.

    Requests carrying neither header are allowed so non-browser clients keep
    working. Unparseable headers fail closed.
    """
    claimed = request.headers.get("origin") or request.headers.get("referer")
    if not claimed:
        return True
    try:
        return _parse_origin(claimed) == _server_origin(request)
    except ValueError:
        return False
