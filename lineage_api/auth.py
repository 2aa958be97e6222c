"""Shared-secret login check and acting-identity lookup.

Provides:
- Verification of the process-wide private key (plaintext or passlib hash)
- ``get_editor_id`` for handlers that need the acting person's id
"""

from __future__ import annotations

import secrets

from fastapi import Request
from passlib.context import CryptContext

from .settings import get_settings

# ---------------------------------------------------------------------------
# Private key
# ---------------------------------------------------------------------------

_key_ctx = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_private_key(plain: str) -> str:
    return _key_ctx.hash(plain)


def verify_private_key(candidate: str | None) -> bool:
    """Return True when *candidate* matches the configured secret.

    ``PRIVATE_KEY_HASH`` wins over ``PRIVATE_KEY``.  With neither set, nothing
    matches.
    """
    if not candidate:
        return False
    settings = get_settings()
    if settings.private_key_hash:
        return _key_ctx.verify(candidate, settings.private_key_hash)
    if settings.private_key:
        return secrets.compare_digest(candidate.encode("utf-8"), settings.private_key.encode("utf-8"))
    return False


# ---------------------------------------------------------------------------
# Acting identity
# ---------------------------------------------------------------------------


def get_editor_id(request: Request) -> str | None:
    """Return the acting person's id (set on ``request.state`` by middleware).

    The id is taken on trust from the client; nothing verifies it.
    """
    return getattr(request.state, "editor_id", None)
