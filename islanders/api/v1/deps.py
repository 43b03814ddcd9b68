from __future__ import annotations

from fastapi import Header, Request

from islanders.core.runtime import Runtime

DEFAULT_USER_ID = "guest"


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime


def get_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Caller identity, passed explicitly to every booking/notification call."""
    return (x_user_id or "").strip() or DEFAULT_USER_ID
