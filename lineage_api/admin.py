"""CLI admin tool for bootstrapping the registry.

Usage:
    python -m lineage_api.admin init-db
    python -m lineage_api.admin create-person --firstname=Ada --surname=King --dob=1815-12-10 --admin
    python -m lineage_api.admin promote --id=<person id>
    python -m lineage_api.admin hash-key --key=<shared secret>
    python -m lineage_api.admin list-persons
"""

from __future__ import annotations

import argparse
import logging
import os
from datetime import date
from pathlib import Path

import psycopg

from .auth import hash_private_key
from .db import get_database_url, store_errors
from .errors import NotFound
from .persons import ADMIN_ROLE, Gender, create_person, list_persons, set_role

log = logging.getLogger(__name__)

_SCHEMA_SQL = Path(__file__).resolve().parent.parent / "sql" / "schema.sql"


def cmd_init_db(args: argparse.Namespace) -> None:
    if not _SCHEMA_SQL.exists():
        raise SystemExit(f"Schema file not found: {_SCHEMA_SQL}")
    with store_errors(), psycopg.connect(get_database_url()) as conn:
        conn.execute(_SCHEMA_SQL.read_text(encoding="utf-8"))
        conn.commit()
    print("Schema applied.")


def cmd_create_person(args: argparse.Namespace) -> None:
    try:
        dob = date.fromisoformat(args.dob)
    except ValueError:
        raise SystemExit(f"Invalid --dob '{args.dob}'. Use YYYY-MM-DD.")

    with store_errors(), psycopg.connect(get_database_url()) as conn:
        person_id = create_person(
            conn,
            firstname=args.firstname,
            surname=args.surname,
            dob=dob,
            gender=Gender(args.gender) if args.gender else None,
            role=ADMIN_ROLE if args.admin else None,
        )
        conn.commit()
    log.info("created person %s (admin=%s)", person_id, args.admin)
    print(person_id)


def cmd_promote(args: argparse.Namespace) -> None:
    with store_errors(), psycopg.connect(get_database_url()) as conn:
        try:
            set_role(conn, args.id, ADMIN_ROLE)
        except NotFound:
            raise SystemExit(f"Person '{args.id}' not found.")
        conn.commit()
    print(f"Person '{args.id}' is now {ADMIN_ROLE}.")


def cmd_hash_key(args: argparse.Namespace) -> None:
    print(hash_private_key(args.key))


def cmd_list_persons(args: argparse.Namespace) -> None:
    with store_errors(), psycopg.connect(get_database_url()) as conn:
        persons = list_persons(conn)

    if not persons:
        print("No persons.")
        return
    print(f"{'ID':<37} {'Name':<30} {'Born':<11} {'Role':<6}")
    print("-" * 86)
    for p in persons:
        name = f"{p['firstname']} {p['surname']}"
        print(f"{p['id']:<37} {name:<30} {str(p['dob']):<11} {(p['role'] or '-'):<6}")


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

    parser = argparse.ArgumentParser(description="Lineage registry admin CLI")
    sub = parser.add_subparsers(dest="command")

    # init-db
    sub.add_parser("init-db", help="Create the registry tables")

    # create-person
    p = sub.add_parser("create-person", help="Create a root person")
    p.add_argument("--firstname", required=True)
    p.add_argument("--surname", required=True)
    p.add_argument("--dob", required=True, help="Date of birth, YYYY-MM-DD")
    p.add_argument("--gender", default=None, choices=[g.value for g in Gender])
    p.add_argument("--admin", action="store_true", help="Give the person the ADMIN role")

    # promote
    p = sub.add_parser("promote", help="Give an existing person the ADMIN role")
    p.add_argument("--id", required=True)

    # hash-key
    p = sub.add_parser("hash-key", help="Print a hash of the shared secret for PRIVATE_KEY_HASH")
    p.add_argument("--key", required=True)

    # list-persons
    sub.add_parser("list-persons", help="List all persons")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    dispatch = {
        "init-db": cmd_init_db,
        "create-person": cmd_create_person,
        "promote": cmd_promote,
        "hash-key": cmd_hash_key,
        "list-persons": cmd_list_persons,
    }
    dispatch[args.command](args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
