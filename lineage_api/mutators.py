"""Relationship Mutators.

Each mutator creates one new person and the edges that attach it to an
existing target.  Preconditions are checked before the first write, and all
writes of a mutator share one ``conn.transaction()`` block, so a failure
leaves the store exactly as it was.

``strict`` enables the older marital checks: add-spouse refuses a target that
is already married and add-child refuses a target that is not.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

import psycopg

from .errors import PreconditionFailed
from .persons import Gender, create_person, get_person, mark_married
from .relations import add_marriage, add_parent_child, marriage_partner, parents_of

log = logging.getLogger(__name__)


def _add_parent(
    conn: psycopg.Connection,
    child_id: str,
    *,
    firstname: str,
    surname: str,
    dob: date,
    gender: Gender,
) -> str:
    get_person(conn, child_id)

    with conn.transaction():
        parent_id = create_person(conn, firstname=firstname, surname=surname, dob=dob, gender=gender)
        add_parent_child(conn, parent_id, child_id)

    log.info("added %s parent %s to %s", gender.value.lower(), parent_id, child_id)
    return parent_id


def add_father(conn: psycopg.Connection, child_id: str, *, firstname: str, surname: str, dob: date) -> str:
    return _add_parent(conn, child_id, firstname=firstname, surname=surname, dob=dob, gender=Gender.MALE)


def add_mother(conn: psycopg.Connection, child_id: str, *, firstname: str, surname: str, dob: date) -> str:
    return _add_parent(conn, child_id, firstname=firstname, surname=surname, dob=dob, gender=Gender.FEMALE)


def add_spouse(
    conn: psycopg.Connection,
    person_id: str,
    *,
    firstname: str,
    surname: str,
    dob: date,
    gender: Optional[Gender] = None,
    strict: bool = False,
) -> str:
    person = get_person(conn, person_id)
    if strict and person["married"]:
        raise PreconditionFailed("Already married")

    with conn.transaction():
        spouse_id = create_person(
            conn,
            firstname=firstname,
            surname=surname,
            dob=dob,
            gender=gender,
            married=True,
        )
        add_marriage(conn, person_id, spouse_id)
        mark_married(conn, [person_id, spouse_id])

    log.info("added spouse %s to %s", spouse_id, person_id)
    return spouse_id


def add_sibling(
    conn: psycopg.Connection,
    person_id: str,
    *,
    firstname: str,
    surname: str,
    dob: date,
    gender: Optional[Gender] = None,
) -> str:
    get_person(conn, person_id)
    parents = parents_of(conn, person_id)
    if not parents:
        raise PreconditionFailed("Parents required")

    with conn.transaction():
        sibling_id = create_person(conn, firstname=firstname, surname=surname, dob=dob, gender=gender)
        for parent_id in parents:
            add_parent_child(conn, parent_id, sibling_id)

    log.info("added sibling %s to %s (%d parents)", sibling_id, person_id, len(parents))
    return sibling_id


def add_child(
    conn: psycopg.Connection,
    parent_id: str,
    *,
    firstname: str,
    surname: str,
    dob: date,
    gender: Optional[Gender] = None,
    strict: bool = False,
) -> str:
    """Add a child to *parent_id*, and to their spouse when they have one."""
    parent = get_person(conn, parent_id)
    if strict and not parent["married"]:
        raise PreconditionFailed("Parent must be married")
    spouse_id = marriage_partner(conn, parent_id)

    with conn.transaction():
        child_id = create_person(conn, firstname=firstname, surname=surname, dob=dob, gender=gender)
        add_parent_child(conn, parent_id, child_id)
        if spouse_id is not None:
            add_parent_child(conn, spouse_id, child_id)

    log.info("added child %s to %s (spouse=%s)", child_id, parent_id, spouse_id)
    return child_id
