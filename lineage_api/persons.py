"""Person Store: parameterized CRUD over the ``persons`` table."""

from __future__ import annotations

import uuid
from datetime import date
from enum import Enum
from typing import Any, Iterable, Optional

import psycopg

from .errors import NotFound

ADMIN_ROLE = "ADMIN"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


PERSON_FIELDS = (
    "id",
    "firstname",
    "surname",
    "dob",
    "gender",
    "profile_pic",
    "instagram",
    "anniversary",
    "married",
    "role",
)

# Fields the partial-merge update may touch. ``married`` follows the marriage
# edges and ``role`` is only set through the admin CLI.
EDITABLE_FIELDS = (
    "firstname",
    "surname",
    "dob",
    "gender",
    "instagram",
    "anniversary",
    "profile_pic",
)

_SELECT_PERSON = "SELECT " + ", ".join(PERSON_FIELDS) + " FROM persons"


def new_id() -> str:
    return str(uuid.uuid4())


def _row_to_person(row: tuple[Any, ...]) -> dict[str, Any]:
    person = dict(zip(PERSON_FIELDS, row))
    person["married"] = bool(person["married"])
    return person


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, str) and not value.strip():
        return None
    return value


def create_person(
    conn: psycopg.Connection,
    *,
    firstname: str,
    surname: str,
    dob: date,
    gender: Gender | str | None = None,
    profile_pic: Optional[str] = None,
    married: bool = False,
    role: Optional[str] = None,
) -> str:
    person_id = new_id()
    conn.execute(
        """
        INSERT INTO persons (id, firstname, surname, dob, gender, profile_pic, married, role)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
        """.strip(),
        (
            person_id,
            firstname,
            surname,
            dob,
            _blank_to_none(gender),
            profile_pic,
            married,
            role,
        ),
    )
    return person_id


def find_person(conn: psycopg.Connection, person_id: str) -> dict[str, Any] | None:
    if not person_id:
        return None
    row = conn.execute(_SELECT_PERSON + " WHERE id = %s", (person_id,)).fetchone()
    return _row_to_person(row) if row else None


def get_person(conn: psycopg.Connection, person_id: str) -> dict[str, Any]:
    person = find_person(conn, person_id)
    if person is None:
        raise NotFound(f"person not found: {person_id}")
    return person


def list_persons(conn: psycopg.Connection) -> list[dict[str, Any]]:
    rows = conn.execute(_SELECT_PERSON + " ORDER BY surname, firstname, id").fetchall()
    return [_row_to_person(r) for r in rows]


def find_by_name(conn: psycopg.Connection, firstname: str, surname: str) -> dict[str, Any] | None:
    row = conn.execute(
        _SELECT_PERSON + " WHERE firstname = %s AND surname = %s ORDER BY id LIMIT 1",
        (firstname, surname),
    ).fetchone()
    return _row_to_person(row) if row else None


def update_person(conn: psycopg.Connection, person_id: str, changes: dict[str, Any]) -> None:
    """Partial-merge update.

    Each editable column is written as ``COALESCE(new, old)``, so a field that
    is missing from *changes*, ``None`` or an empty string keeps its stored
    value.  Unknown keys are rejected.
    """

    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"not editable: {', '.join(sorted(unknown))}")

    assignments = ", ".join(f"{col} = COALESCE(%s, {col})" for col in EDITABLE_FIELDS)
    params = [_blank_to_none(changes.get(col)) for col in EDITABLE_FIELDS]
    row = conn.execute(
        f"UPDATE persons SET {assignments} WHERE id = %s RETURNING id",
        (*params, person_id),
    ).fetchone()
    if not row:
        raise NotFound(f"person not found: {person_id}")


def mark_married(conn: psycopg.Connection, person_ids: Iterable[str]) -> None:
    conn.execute(
        "UPDATE persons SET married = TRUE WHERE id = ANY(%s)",
        (list(person_ids),),
    )


def set_role(conn: psycopg.Connection, person_id: str, role: Optional[str]) -> None:
    row = conn.execute(
        "UPDATE persons SET role = %s WHERE id = %s RETURNING id",
        (role, person_id),
    ).fetchone()
    if not row:
        raise NotFound(f"person not found: {person_id}")


def is_admin(person: dict[str, Any]) -> bool:
    return person.get("role") == ADMIN_ROLE
