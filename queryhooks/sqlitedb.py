"""An SQLite database that runs query hooks, with a small users and profiles schema."""

from __future__ import annotations

import argparse
import re
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

from queryhooks import jsonprovider
from queryhooks.debug import DebugHook
from queryhooks.events import HookRunner, QueryHook, QueryStats

_PLACEHOLDER_RE = re.compile(r"'(?:[^']|'')*'|\?")


def _sql_literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (bytes, bytearray)):
        return "X'" + bytes(value).hex().upper() + "'"
    text = str(value).replace("'", "''")
    return f"'{text}'"


def _bind(value: Any) -> Any:
    to_value = getattr(value, "value", None)
    if callable(to_value):
        return to_value()
    return value


def _format_query(template: str, args: list) -> str:
    remaining = iter(args)

    def substitute(match: re.Match) -> str:
        if match.group(0) != "?":
            return match.group(0)
        try:
            return _sql_literal(next(remaining))
        except StopIteration:
            return "?"

    return _PLACEHOLDER_RE.sub(substitute, template)


class Database:
    """An SQLite connection whose every statement passes through query hooks."""

    dialect_name = "sqlite"

    def __init__(self, path: str = ":memory:") -> None:
        self._conn = sqlite3.connect(path, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._hooks = HookRunner(self)

    @property
    def stats(self) -> QueryStats:
        return self._hooks.stats

    def add_query_hook(self, hook: QueryHook) -> None:
        self._hooks.add_query_hook(hook)

    def _run(self, query: str, args: tuple):
        params = [_bind(arg) for arg in args]
        ctx, event = self._hooks.before_query(
            {}, None, query, params, _format_query(query, params), None
        )
        try:
            cursor = self._conn.execute(query, params)
        except sqlite3.Error as exc:
            self._hooks.after_query(ctx, event, None, exc)
            raise
        return ctx, event, cursor

    def execute(self, query: str, *args) -> sqlite3.Cursor:
        """Run a statement; arguments with a value() method are bound by its result."""
        ctx, event, cursor = self._run(query, args)
        self._hooks.after_query(ctx, event, cursor, None)
        return cursor

    def query(self, query: str, *args) -> list[dict]:
        """Run a query and return its rows as dictionaries."""
        ctx, event, cursor = self._run(query, args)
        try:
            rows = [dict(row) for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            self._hooks.after_query(ctx, event, cursor, exc)
            raise
        self._hooks.after_query(ctx, event, cursor, None)
        return rows

    @contextmanager
    def run_in_tx(self) -> Iterator[Database]:
        """Run the block in a transaction: commit on success, roll back on error."""
        self.execute("BEGIN")
        try:
            yield self
        except BaseException:
            self.execute("ROLLBACK")
            raise
        self.execute("COMMIT")

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@dataclass
class User:
    id: int = 0
    name: str = ""
    emails: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"User<{self.id} {self.name} {self.emails}>"


@dataclass
class Profile:
    id: int = 0
    user_id: int = 0
    email: str = ""


def reset_schema(db: Database) -> list[User]:
    """Recreate the users and profiles tables and seed two users."""
    db.execute("DROP TABLE IF EXISTS profiles")
    db.execute("DROP TABLE IF EXISTS users")
    db.execute(
        "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "name VARCHAR NOT NULL DEFAULT '', emails VARCHAR)"
    )
    db.execute(
        "CREATE TABLE profiles (id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "user_id INTEGER NOT NULL DEFAULT 0, email VARCHAR NOT NULL DEFAULT '')"
    )
    users = [
        User(name="admin", emails=["admin1@example.com", "admin2@example.com"]),
        User(name="root", emails=["root1@example.com", "root2@example.com"]),
    ]
    for user in users:
        insert_user(db, user)
    return users


def insert_user(db: Database, user: User) -> User:
    """Insert a user, setting its id when the database assigns one."""
    cursor = db.execute(
        "INSERT INTO users (id, name, emails) VALUES (?, ?, ?)",
        user.id or None,
        user.name,
        jsonprovider.marshal(user.emails).decode(),
    )
    user.id = cursor.lastrowid
    return user


def insert_profile(db: Database, profile: Profile) -> Profile:
    """Insert a profile, setting its id when the database assigns one."""
    cursor = db.execute(
        "INSERT INTO profiles (id, user_id, email) VALUES (?, ?, ?)",
        profile.id or None,
        profile.user_id,
        profile.email,
    )
    profile.id = cursor.lastrowid
    return profile


def insert_user_and_profile(db: Database) -> tuple[User, Profile]:
    """Insert a user and a profile that points at it."""
    user = insert_user(db, User(name="Smith"))
    profile = insert_profile(db, Profile(user_id=user.id, email="smith@example.com"))
    return user, profile


def _load_users(db: Database, where: str = "", *args) -> list[User]:
    sql = "SELECT id, name, emails FROM users"
    if where:
        sql += " WHERE " + where
    rows = db.query(sql + " ORDER BY id ASC", *args)
    return [
        User(
            id=row["id"],
            name=row["name"],
            emails=jsonprovider.unmarshal(row["emails"]) if row["emails"] else [],
        )
        for row in rows
    ]


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="queryhooks-sqlite",
        description="Seed an SQLite database and run a few queries through hooks.",
    )
    parser.add_argument("--database", default=":memory:", help="database file")
    options = parser.parse_args(argv)

    with Database(options.database) as db:
        db.add_query_hook(DebugHook(verbose=True).apply_env("BUNDEBUG"))
        reset_schema(db)

        users = _load_users(db)
        print(f"all users: [{', '.join(str(user) for user in users)}]\n")

        user1 = _load_users(db, "id = ?", 1)
        if user1:
            print(f"user1: {user1[0]}\n")

        rows = db.query("SELECT * FROM users LIMIT 1")
        print(f"user map: {rows[0] if rows else {}}\n")

        ids = [row["id"] for row in db.query("SELECT id FROM users ORDER BY id ASC")]
        names = [row["name"] for row in db.query("SELECT name FROM users ORDER BY id ASC")]
        print(f"users columns: {ids} {names}\n")

        insert_user_and_profile(db)
        with db.run_in_tx() as tx:
            insert_user_and_profile(tx)

        print(db.query("SELECT random() AS rnd")[0]["rnd"])
    return 0