"""
CORS policy for the invite-user function boundary.

Permissive by intent: any origin may call, but only POST (plus the OPTIONS
preflight) and the Supabase client headers are allowed.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

CORS_HEADERS: Mapping[str, str] = MappingProxyType(
    {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
    }
)

__all__ = ["CORS_HEADERS"]
