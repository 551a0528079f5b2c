"""
rate_limit.py — Login rate limiting
===================================
Uses slowapi to enforce per-IP limits on the admin login endpoint,
preventing brute-force attempts. Review submissions are throttled
separately by the persisted record in submission/throttle.py.
"""
from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
