from __future__ import annotations

import hmac

from fastapi import HTTPException, Request

import aura.config.settings as settings


def extract_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip()
    token_header = request.headers.get("X-Aura-Token", "").strip()
    return token_header or None


async def require_admin_auth(request: Request) -> dict[str, str]:
    expected = settings.ADMIN_AUTH_TOKEN
    if not expected:
        raise HTTPException(status_code=503, detail="ADMIN_AUTH_TOKEN is not configured")

    token = extract_token(request)
    if token and hmac.compare_digest(token, expected):
        return {"auth": "token", "user": "admin-token"}

    raise HTTPException(status_code=401, detail="Unauthorized")
