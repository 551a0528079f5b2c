"""
cors.py — App-wide CORS that leaves the submit endpoint alone
==============================================================
/submit-review answers its own pre-flight (empty body, ``*`` origin,
fixed header list) and stamps the same headers on every response, so
the middleware must not answer for it.
"""
from __future__ import annotations

from typing import Iterable

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class PathExemptCORSMiddleware(CORSMiddleware):
    def __init__(self, app: ASGIApp, exempt_paths: Iterable[str] = (), **kwargs) -> None:
        super().__init__(app, **kwargs)
        self.exempt_paths = frozenset(exempt_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"] in self.exempt_paths:
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
