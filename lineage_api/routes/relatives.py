"""Relationship mutator routes.

Each endpoint creates a new person from the JSON body and attaches it to the
person in the path.  The acting person (``userid`` header) must be allowed to
edit that person.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from .. import mutators
from ..auth import get_editor_id
from ..db import db_conn
from ..permissions import require_edit
from ..persons import Gender
from ..settings import get_settings

router = APIRouter(tags=["relatives"])


class RelativeCreate(BaseModel):
    firstname: str
    surname: str
    dob: date
    gender: Optional[Gender] = None


def _created(new_id: str) -> dict[str, Any]:
    return {"success": True, "id": new_id}


@router.post("/add-father/{person_id}")
def add_father(person_id: str, body: RelativeCreate, request: Request) -> dict[str, Any]:
    with db_conn() as conn:
        require_edit(conn, get_editor_id(request), person_id)
        new_id = mutators.add_father(
            conn, person_id, firstname=body.firstname, surname=body.surname, dob=body.dob
        )
        conn.commit()
    return _created(new_id)


@router.post("/add-mother/{person_id}")
def add_mother(person_id: str, body: RelativeCreate, request: Request) -> dict[str, Any]:
    with db_conn() as conn:
        require_edit(conn, get_editor_id(request), person_id)
        new_id = mutators.add_mother(
            conn, person_id, firstname=body.firstname, surname=body.surname, dob=body.dob
        )
        conn.commit()
    return _created(new_id)


@router.post("/add-spouse/{person_id}")
def add_spouse(person_id: str, body: RelativeCreate, request: Request) -> dict[str, Any]:
    with db_conn() as conn:
        require_edit(conn, get_editor_id(request), person_id)
        new_id = mutators.add_spouse(
            conn,
            person_id,
            firstname=body.firstname,
            surname=body.surname,
            dob=body.dob,
            gender=body.gender,
            strict=get_settings().strict_marriage_checks,
        )
        conn.commit()
    return _created(new_id)


@router.post("/add-sibling/{person_id}")
def add_sibling(person_id: str, body: RelativeCreate, request: Request) -> dict[str, Any]:
    with db_conn() as conn:
        require_edit(conn, get_editor_id(request), person_id)
        new_id = mutators.add_sibling(
            conn,
            person_id,
            firstname=body.firstname,
            surname=body.surname,
            dob=body.dob,
            gender=body.gender,
        )
        conn.commit()
    return _created(new_id)


@router.post("/add-child/{person_id}")
def add_child(person_id: str, body: RelativeCreate, request: Request) -> dict[str, Any]:
    with db_conn() as conn:
        require_edit(conn, get_editor_id(request), person_id)
        new_id = mutators.add_child(
            conn,
            person_id,
            firstname=body.firstname,
            surname=body.surname,
            dob=body.dob,
            gender=body.gender,
            strict=get_settings().strict_marriage_checks,
        )
        conn.commit()
    return _created(new_id)
