"""Permission Evaluator: who may edit whose record.

An editor may change a record when any of these hold, checked in order:

- the editor is an ADMIN
- the editor is the target
- the target is one of the editor's parents
- the target is one of the editor's children
- the editor and the target are married

Only one hop of the graph is considered.  Grandparents, siblings and in-laws
are denied.
"""

from __future__ import annotations

import logging

import psycopg

from .errors import PermissionDenied
from .persons import find_person, is_admin
from .relations import are_married, children_of, parents_of

log = logging.getLogger(__name__)


def can_edit(conn: psycopg.Connection, editor_id: str | None, target_id: str) -> bool:
    if not editor_id:
        return False

    editor = find_person(conn, editor_id)
    if editor is None:
        return False

    if is_admin(editor):
        return True
    if editor_id == target_id:
        return True
    if target_id in parents_of(conn, editor_id):
        return True
    if target_id in children_of(conn, editor_id):
        return True
    if are_married(conn, editor_id, target_id):
        return True

    return False


def require_edit(conn: psycopg.Connection, editor_id: str | None, target_id: str) -> None:
    if not can_edit(conn, editor_id, target_id):
        log.warning("edit denied: editor=%s target=%s", editor_id, target_id)
        raise PermissionDenied()
