from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg

from .errors import StoreFailure
from .settings import get_settings

log = logging.getLogger(__name__)


def get_database_url() -> str:
    url = get_settings().database_url
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate driver errors into :class:`StoreFailure`.

    The original error is logged with its traceback; the client only sees a
    generic message.
    """
    try:
        yield
    except psycopg.Error as exc:
        log.exception("store operation failed")
        raise StoreFailure() from exc


@contextmanager
def db_conn() -> Iterator[psycopg.Connection]:
    """Yield a connection that commits on clean exit and rolls back on error."""
    with store_errors():
        with psycopg.connect(get_database_url()) as conn:
            yield conn
