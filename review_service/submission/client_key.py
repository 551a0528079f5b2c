"""
client_key.py — Pseudonymous client identity for throttling
===========================================================
The raw network address is resolved from proxy headers and immediately
folded into a salted SHA-256 digest. Only the digest is stored.

Header precedence (first non-empty wins):

    X-Forwarded-For   first entry of the comma-separated chain
    X-Real-IP
    CF-Connecting-IP
    "unknown"         sentinel

Every request without any of these headers resolves to the sentinel,
so all such clients share one throttle bucket.
"""
from __future__ import annotations

import hashlib
from typing import Mapping, Optional

from ..config import settings

UNKNOWN_ADDRESS = "unknown"

ADDRESS_HEADERS = (
    "x-forwarded-for",
    "x-real-ip",
    "cf-connecting-ip",
)


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    # Starlette Headers are case-insensitive; plain dicts from tests may not be
    value = headers.get(name)
    if value is None:
        value = headers.get(name.title())
    return value


def resolve_client_address(headers: Mapping[str, str]) -> str:
    for name in ADDRESS_HEADERS:
        value = _header(headers, name)
        if not value:
            continue
        if name == "x-forwarded-for":
            value = value.split(",")[0]
        value = value.strip()
        if value:
            return value
    return UNKNOWN_ADDRESS


def derive_client_key(address: str, secret: Optional[str] = None) -> str:
    """64-char hex digest of address + secret. Deterministic, not reversible without the secret."""
    salt = settings.ip_hash_secret if secret is None else secret
    return hashlib.sha256((address + salt).encode("utf-8")).hexdigest()


def client_key_for(headers: Mapping[str, str]) -> str:
    return derive_client_key(resolve_client_address(headers))
