"""Caller identity middleware using ContextVar.

Authentication happens upstream (gateway or auth service), which forwards
the verified user id in the X-User-ID header. The id is stored in a
ContextVar so that any downstream code can call get_current_user() without
explicit parameter passing.
"""

from contextvars import ContextVar
from typing import Optional

from fastapi import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

USER_HEADER = "X-User-ID"

# ---------------------------------------------------------------------------
# Context variable: per-request caller state
# ---------------------------------------------------------------------------

_current_user: ContextVar[Optional[str]] = ContextVar("current_user", default=None)


def get_current_user() -> Optional[str]:
    """Return the caller's user id for the current request, if any."""
    return _current_user.get()


async def require_current_user() -> str:
    """FastAPI dependency: the caller's user id, or 401.

    Usage in routes::

        @router.get("/me")
        async def me(user_id: str = Depends(require_current_user)):
            ...
    """
    user_id = get_current_user()
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class CurrentUserMiddleware(BaseHTTPMiddleware):
    """Copy the X-User-ID header into the request context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        user_id = request.headers.get(USER_HEADER, "").strip() or None

        token = _current_user.set(user_id)
        try:
            response = await call_next(request)
            return response
        finally:
            _current_user.reset(token)
