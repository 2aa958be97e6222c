"""Relationship Store: append-only parent/child and marriage edges."""

from __future__ import annotations

from typing import Any

import psycopg

from .persons import new_id


def add_parent_child(conn: psycopg.Connection, parent_id: str, child_id: str) -> None:
    conn.execute(
        "INSERT INTO parent_child (parent_id, child_id) VALUES (%s, %s)",
        (parent_id, child_id),
    )


def add_marriage(conn: psycopg.Connection, person1_id: str, person2_id: str) -> str:
    marriage_id = new_id()
    conn.execute(
        """
        INSERT INTO marriages (id, person1_id, person2_id, dissolved_at)
        VALUES (%s, %s, %s, NULL)
        """.strip(),
        (marriage_id, person1_id, person2_id),
    )
    return marriage_id


def parents_of(conn: psycopg.Connection, child_id: str) -> list[str]:
    rows = conn.execute(
        "SELECT parent_id FROM parent_child WHERE child_id = %s ORDER BY parent_id",
        (child_id,),
    ).fetchall()
    return [r[0] for r in rows]


def children_of(conn: psycopg.Connection, parent_id: str) -> list[str]:
    rows = conn.execute(
        "SELECT child_id FROM parent_child WHERE parent_id = %s ORDER BY child_id",
        (parent_id,),
    ).fetchall()
    return [r[0] for r in rows]


def marriage_partner(conn: psycopg.Connection, person_id: str) -> str | None:
    """Return the partner from *person_id*'s earliest active marriage."""
    row = conn.execute(
        """
        SELECT person1_id, person2_id
        FROM marriages
        WHERE (person1_id = %s OR person2_id = %s)
          AND dissolved_at IS NULL
        ORDER BY created_at, id
        LIMIT 1
        """.strip(),
        (person_id, person_id),
    ).fetchone()
    if not row:
        return None
    person1_id, person2_id = row
    return person2_id if person1_id == person_id else person1_id


def are_married(conn: psycopg.Connection, a: str, b: str) -> bool:
    row = conn.execute(
        """
        SELECT 1
        FROM marriages
        WHERE ((person1_id = %s AND person2_id = %s)
            OR (person1_id = %s AND person2_id = %s))
          AND dissolved_at IS NULL
        LIMIT 1
        """.strip(),
        (a, b, b, a),
    ).fetchone()
    return row is not None


def list_parent_child(conn: psycopg.Connection) -> list[dict[str, Any]]:
    rows = conn.execute(
        "SELECT parent_id, child_id FROM parent_child ORDER BY child_id, parent_id"
    ).fetchall()
    return [{"parent_id": p, "child_id": c} for p, c in rows]


def list_marriages(conn: psycopg.Connection) -> list[dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT id, person1_id, person2_id, dissolved_at
        FROM marriages
        ORDER BY created_at, id
        """.strip()
    ).fetchall()
    return [
        {
            "id": mid,
            "person1_id": p1,
            "person2_id": p2,
            "dissolved_at": dissolved_at,
        }
        for mid, p1, p2, dissolved_at in rows
    ]
