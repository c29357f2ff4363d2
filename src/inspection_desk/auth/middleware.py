"""Session helpers: the manager's identity is established upstream and read from the session."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request, status


def get_user(request: Request) -> dict[str, Any] | None:
    """Extract the authenticated user from the session, if present."""
    return request.session.get("user") if hasattr(request, "session") else None


def require_authenticated_user(request: Request) -> dict[str, Any]:
    """Return the authenticated user or raise HTTP 401."""
    user = get_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def actor_id(request: Request) -> str:
    """Return the id recorded as ``pulled_by``/``created_by`` for this request."""
    user = require_authenticated_user(request)
    return str(user.get("id") or user.get("uid") or "")
