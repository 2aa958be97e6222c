"""Person routes: create, list (with the whole tree), fetch, update.

Create and update accept either a JSON body or a multipart form; a form may
carry a ``photo`` file that goes to the photo store.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Any, Iterator, Optional

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, ValidationError
from starlette.datastructures import UploadFile

from ..auth import get_editor_id
from ..db import db_conn
from ..persons import Gender, create_person, get_person, list_persons, update_person
from ..permissions import require_edit
from ..photos import get_photo_store
from ..relations import list_marriages, list_parent_child

router = APIRouter(tags=["persons"])


class PersonCreate(BaseModel):
    firstname: str
    surname: str
    dob: date
    gender: Optional[Gender] = None


class PersonUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    firstname: Optional[str] = None
    surname: Optional[str] = None
    dob: Optional[date] = None
    gender: Optional[Gender] = None
    instagram: Optional[str] = None
    anniversary: Optional[date] = None


# (bytes, filename) of an uploaded photo
_Upload = tuple[bytes, str]


async def _read_body(request: Request) -> tuple[dict[str, Any], _Upload | None]:
    """Return the non-blank body fields and the uploaded photo, if any."""
    content_type = request.headers.get("content-type", "")
    fields: dict[str, Any] = {}
    photo: _Upload | None = None

    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError as exc:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": "Invalid JSON body", "input": None}]
            ) from exc
        if isinstance(payload, dict):
            fields = dict(payload)
    elif content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == "photo" and value.filename:
                    photo = (await value.read(), value.filename)
                continue
            fields[key] = value

    # Blank values mean "not supplied".
    fields = {
        k: v for k, v in fields.items()
        if v is not None and not (isinstance(v, str) and not v.strip())
    }
    return fields, photo


def _validate(model: type[BaseModel], fields: dict[str, Any]) -> Any:
    try:
        return model.model_validate(fields)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc


@contextmanager
def _stored_photo(photo: _Upload | None) -> Iterator[str | None]:
    """Store *photo* for the duration of a write; discard it if the write fails."""
    if photo is None:
        yield None
        return
    store = get_photo_store()
    data, filename = photo
    uri = store.put(data, filename)
    try:
        yield uri
    except Exception:
        store.discard(uri)
        raise


def _create(body: PersonCreate, photo: _Upload | None) -> dict[str, Any]:
    with _stored_photo(photo) as profile_pic, db_conn() as conn:
        person_id = create_person(
            conn,
            firstname=body.firstname,
            surname=body.surname,
            dob=body.dob,
            gender=body.gender,
            profile_pic=profile_pic,
        )
        person = get_person(conn, person_id)
        conn.commit()
    return person


def _update(person_id: str, editor_id: str | None, body: PersonUpdate, photo: _Upload | None) -> None:
    with db_conn() as conn:
        require_edit(conn, editor_id, person_id)
        get_person(conn, person_id)

        changes = body.model_dump(exclude_none=True)
        with _stored_photo(photo) as profile_pic:
            if profile_pic:
                changes["profile_pic"] = profile_pic
            update_person(conn, person_id, changes)
            conn.commit()


@router.post("/persons")
async def create_person_route(request: Request) -> dict[str, Any]:
    fields, photo = await _read_body(request)
    body = _validate(PersonCreate, fields)
    return await run_in_threadpool(_create, body, photo)


@router.get("/persons")
def list_tree() -> dict[str, Any]:
    """Every person plus every edge, for client-side tree rendering."""
    with db_conn() as conn:
        persons = list_persons(conn)
        relations = list_parent_child(conn)
        marriages = list_marriages(conn)

    return {"persons": persons, "relations": relations, "marriages": marriages}


@router.get("/persons/{person_id}")
def get_person_route(person_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        return get_person(conn, person_id)


@router.put("/persons/{person_id}")
async def update_person_route(person_id: str, request: Request) -> dict[str, Any]:
    """Partially update a person.  Only supplied, non-blank fields change.

    Fields that are not editable (``married``, ``role``, ``id``, ...) are
    rejected with 422 rather than silently ignored.
    """
    fields, photo = await _read_body(request)
    body = _validate(PersonUpdate, fields)
    await run_in_threadpool(_update, person_id, get_editor_id(request), body, photo)
    return {"success": True}
