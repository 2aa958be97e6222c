"""Error taxonomy for the registry.

Each error is an ``HTTPException`` so route handlers can let it propagate and
FastAPI renders it as ``{"detail": ...}`` with the matching status code.
"""

from __future__ import annotations

from fastapi import HTTPException


class RegistryError(HTTPException):
    status_code = 500
    default_detail = "Internal error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class AuthFailure(RegistryError):
    status_code = 401
    default_detail = "Invalid private key"


class NotFound(RegistryError):
    status_code = 404
    default_detail = "Not found"


class PermissionDenied(RegistryError):
    status_code = 403
    default_detail = "Permission denied"


class PreconditionFailed(RegistryError):
    status_code = 400
    default_detail = "Precondition failed"


class StoreFailure(RegistryError):
    status_code = 500
    default_detail = "Database error"
