from __future__ import annotations

import copy
import itertools
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterator

import psycopg
import pytest

from lineage_api.persons import EDITABLE_FIELDS, PERSON_FIELDS, create_person
from lineage_api.settings import get_settings


@dataclass
class _FakeResult:
    rows: list[tuple[Any, ...]]

    def fetchall(self) -> list[tuple[Any, ...]]:
        return list(self.rows)

    def fetchone(self) -> tuple[Any, ...] | None:
        return self.rows[0] if self.rows else None


class FakeConn:
    """In-memory stand-in for a psycopg connection.

    Understands exactly the statements issued by ``lineage_api.persons`` and
    ``lineage_api.relations``, enforces the schema's foreign keys, and supports
    ``transaction()`` with rollback.  ``fail_on`` makes any statement starting
    with that (normalized, lower-case) prefix raise a driver error.
    """

    def __init__(self) -> None:
        self.persons: dict[str, dict[str, Any]] = {}
        self.parent_child: list[tuple[str, str]] = []
        self.marriages: list[dict[str, Any]] = []
        self.fail_on: str | None = None
        self.commits = 0
        self.statements: list[str] = []
        self._seq = itertools.count()

    # -- psycopg surface ---------------------------------------------------

    def __enter__(self) -> "FakeConn":
        return self

    def __exit__(self, *exc: Any) -> bool:
        return False

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = copy.deepcopy((self.persons, self.parent_child, self.marriages))
        try:
            yield
        except BaseException:
            self.persons, self.parent_child, self.marriages = snapshot
            raise

    def commit(self) -> None:
        self.commits += 1

    def execute(self, query: str, params: tuple[Any, ...] | None = None) -> _FakeResult:
        q = " ".join((query or "").split()).lower()
        params = tuple(params or ())
        self.statements.append(q)

        if self.fail_on and q.startswith(self.fail_on):
            raise psycopg.OperationalError(f"injected failure: {self.fail_on}")

        if q.startswith("insert into persons"):
            return self._insert_person(params)

        if q.startswith("select id, firstname") and "from persons" in q:
            return self._select_persons(q, params)

        if q.startswith("update persons set firstname = coalesce"):
            return self._update_person(params)

        if q.startswith("update persons set married = true where id = any"):
            for pid in params[0]:
                if pid in self.persons:
                    self.persons[pid]["married"] = True
            return _FakeResult([])

        if q.startswith("update persons set role"):
            role, pid = params
            if pid not in self.persons:
                return _FakeResult([])
            self.persons[pid]["role"] = role
            return _FakeResult([(pid,)])

        if q.startswith("insert into parent_child"):
            parent_id, child_id = params
            self._require_person(parent_id)
            self._require_person(child_id)
            if parent_id == child_id:
                raise psycopg.IntegrityError("parent_child self edge")
            if (parent_id, child_id) in self.parent_child:
                raise psycopg.IntegrityError("duplicate parent_child edge")
            self.parent_child.append((parent_id, child_id))
            return _FakeResult([])

        if q.startswith("insert into marriages"):
            mid, p1, p2 = params
            self._require_person(p1)
            self._require_person(p2)
            self.marriages.append(
                {"id": mid, "person1_id": p1, "person2_id": p2, "dissolved_at": None, "seq": next(self._seq)}
            )
            return _FakeResult([])

        if q.startswith("select parent_id from parent_child where child_id"):
            return _FakeResult(sorted((p,) for (p, c) in self.parent_child if c == params[0]))

        if q.startswith("select child_id from parent_child where parent_id"):
            return _FakeResult(sorted((c,) for (p, c) in self.parent_child if p == params[0]))

        if q.startswith("select parent_id, child_id from parent_child"):
            return _FakeResult(sorted(self.parent_child, key=lambda e: (e[1], e[0])))

        if q.startswith("select person1_id, person2_id from marriages"):
            pid = params[0]
            rows = [
                (m["person1_id"], m["person2_id"])
                for m in self._active_marriages()
                if pid in (m["person1_id"], m["person2_id"])
            ]
            return _FakeResult(rows[:1])

        if q.startswith("select 1 from marriages"):
            a, b = params[0], params[1]
            hit = any({m["person1_id"], m["person2_id"]} == {a, b} for m in self._active_marriages())
            return _FakeResult([(1,)] if hit else [])

        if q.startswith("select id, person1_id, person2_id, dissolved_at from marriages"):
            ordered = sorted(self.marriages, key=lambda m: (m["seq"], m["id"]))
            return _FakeResult(
                [(m["id"], m["person1_id"], m["person2_id"], m["dissolved_at"]) for m in ordered]
            )

        raise AssertionError(f"Unexpected query: {query}")

    # -- helpers -----------------------------------------------------------

    def _require_person(self, pid: str) -> None:
        if pid not in self.persons:
            raise psycopg.IntegrityError(f"foreign key violation: {pid}")

    def _active_marriages(self) -> list[dict[str, Any]]:
        active = [m for m in self.marriages if m["dissolved_at"] is None]
        return sorted(active, key=lambda m: (m["seq"], m["id"]))

    def _row(self, person: dict[str, Any]) -> tuple[Any, ...]:
        return tuple(person[f] for f in PERSON_FIELDS)

    def _insert_person(self, params: tuple[Any, ...]) -> _FakeResult:
        pid, firstname, surname, dob, gender, profile_pic, married, role = params
        if pid in self.persons:
            raise psycopg.IntegrityError("duplicate person id")
        self.persons[pid] = {
            "id": pid,
            "firstname": firstname,
            "surname": surname,
            "dob": dob,
            "gender": gender,
            "profile_pic": profile_pic,
            "instagram": None,
            "anniversary": None,
            "married": married,
            "role": role,
        }
        return _FakeResult([])

    def _select_persons(self, q: str, params: tuple[Any, ...]) -> _FakeResult:
        if "where id = %s" in q:
            person = self.persons.get(params[0])
            return _FakeResult([self._row(person)] if person else [])
        if "where firstname = %s and surname = %s" in q:
            hits = sorted(
                (p for p in self.persons.values() if (p["firstname"], p["surname"]) == params),
                key=lambda p: p["id"],
            )
            return _FakeResult([self._row(p) for p in hits[:1]])
        ordered = sorted(self.persons.values(), key=lambda p: (p["surname"], p["firstname"], p["id"]))
        return _FakeResult([self._row(p) for p in ordered])

    def _update_person(self, params: tuple[Any, ...]) -> _FakeResult:
        *values, pid = params
        person = self.persons.get(pid)
        if person is None:
            return _FakeResult([])
        for col, value in zip(EDITABLE_FIELDS, values):
            if value is not None:
                person[col] = value
        return _FakeResult([(pid,)])


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    for name in ("PRIVATE_KEY", "PRIVATE_KEY_HASH", "REGISTRY_STRICT_MARRIAGE", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PHOTO_DIR", str(tmp_path / "media"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def conn() -> FakeConn:
    return FakeConn()


@pytest.fixture()
def make_person(conn: FakeConn) -> Callable[..., str]:
    """Create a person directly in the fake store and return its id."""

    def _make(firstname: str, surname: str = "Doe", **kwargs: Any) -> str:
        kwargs.setdefault("dob", date(1970, 1, 1))
        return create_person(conn, firstname=firstname, surname=surname, **kwargs)

    return _make
