"""
Caller identity.

Sessions are issued upstream; the gateway forwards the authenticated user id
in the X-User-Id header.
"""
from fastapi import Header, HTTPException, status


def require_user_id(user_id: str | None = Header(default=None, alias="X-User-Id")) -> str:
    if not user_id or not user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user_id.strip()
