"""Auth routes: shared-secret login."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from ..auth import verify_private_key
from ..db import db_conn
from ..errors import AuthFailure, NotFound
from ..persons import find_by_name

log = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    firstname: Optional[str] = None
    surname: Optional[str] = None
    private_key: Optional[str] = Field(default=None, alias="privateKey")


@router.post("/login")
def login(body: LoginRequest) -> dict[str, Any]:
    """Check the shared secret, then return the named person's record."""
    # The secret is checked before the body is otherwise inspected.
    if not verify_private_key(body.private_key):
        log.warning("login rejected for %s %s: bad private key", body.firstname, body.surname)
        raise AuthFailure()

    if not body.firstname or not body.surname:
        raise NotFound("User not found")

    with db_conn() as conn:
        person = find_by_name(conn, body.firstname, body.surname)

    if person is None:
        raise NotFound("User not found")

    log.info("login: %s", person["id"])
    return person
