"""Request-level identity resolution.

Copies the acting person's id from the ``userid`` header into
``request.state.editor_id``.  Handlers read it through
:func:`lineage_api.auth.get_editor_id` and never look at the header
themselves, so a verified session can replace this middleware later.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

IDENTITY_HEADER = "userid"


def _editor_from_headers(request: Request) -> str | None:
    value = request.headers.get(IDENTITY_HEADER, "").strip()
    return value or None


class IdentityMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that records who is making the request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request.state.editor_id = _editor_from_headers(request)
        return await call_next(request)
