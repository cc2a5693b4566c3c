from __future__ import annotations

import hmac

from fastapi import Header, HTTPException, Request, status

from ..core.config import settings


class AuthContext:
    def __init__(self, *, subject: str, scheme: str) -> None:
        self.subject = subject
        self.scheme = scheme


async def require_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> AuthContext:
    """Check ``X-API-Key`` against the configured key; no key configured means open."""

    api_key = settings.API_KEY
    if not api_key:
        request.state.principal = "anonymous"
        return AuthContext(subject="anonymous", scheme="open")

    provided_key = (x_api_key or "").strip()
    if provided_key and hmac.compare_digest(api_key, provided_key):
        request.state.principal = "api-key"
        return AuthContext(subject="api-key", scheme="api_key")

    detail = "Invalid API key" if provided_key else "API key required"
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
