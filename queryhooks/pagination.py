"""Cursor-based pagination over a table of entries."""

from __future__ import annotations

import argparse
from dataclasses import dataclass

from queryhooks.debug import DebugHook
from queryhooks.sqlitedb import Database

PAGE_SIZE = 10
_SEED_SIZE = 100


@dataclass
class Entry:
    id: int = 0
    text: str = ""

    def __str__(self) -> str:
        return str(self.id)


@dataclass(frozen=True)
class Cursor:
    """Ids of the first and last entries on a page."""

    start: int = 0
    end: int = 0


def new_cursor(entries: list[Entry]) -> Cursor:
    if not entries:
        return Cursor()
    return Cursor(start=entries[0].id, end=entries[-1].id)


def reset_db(db: Database) -> None:
    """Recreate the entries table holding ids 1 to 100."""
    db.execute("DROP TABLE IF EXISTS entries")
    db.execute(
        "CREATE TABLE entries (id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "text VARCHAR NOT NULL DEFAULT '')"
    )
    placeholders = ", ".join("(?, ?)" for _ in range(_SEED_SIZE))
    params = [value for ident in range(1, _SEED_SIZE + 1) for value in (ident, "")]
    db.execute(f"INSERT INTO entries (id, text) VALUES {placeholders}", *params)


def _entries(rows: list[dict]) -> list[Entry]:
    return [Entry(id=row["id"], text=row["text"]) for row in rows]


def select_next_page(db: Database, cursor: int) -> tuple[list[Entry], Cursor]:
    """The page of entries after the given id."""
    rows = db.query(
        "SELECT id, text FROM entries WHERE id > ? ORDER BY id ASC LIMIT ?",
        cursor,
        PAGE_SIZE,
    )
    entries = _entries(rows)
    return entries, new_cursor(entries)


def select_prev_page(db: Database, cursor: int) -> tuple[list[Entry], Cursor]:
    """The page of entries before the given id, in ascending order."""
    rows = db.query(
        "SELECT id, text FROM entries WHERE id < ? ORDER BY id DESC LIMIT ?",
        cursor,
        PAGE_SIZE,
    )
    entries = sorted(_entries(rows), key=lambda entry: entry.id)
    return entries, new_cursor(entries)


def _show(entries: list[Entry]) -> str:
    return "[" + " ".join(str(entry) for entry in entries) + "]"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="queryhooks-pagination",
        description="Walk a table page by page with cursors.",
    )
    parser.parse_args(argv)
    with Database() as db:
        db.add_query_hook(DebugHook(verbose=True).apply_env("BUNDEBUG"))
        reset_db(db)

        page1, cursor = select_next_page(db, 0)
        page2, cursor = select_next_page(db, cursor.end)
        page3, cursor = select_next_page(db, cursor.end)
        prev_page, _ = select_prev_page(db, cursor.start)

        print("page #1", _show(page1))
        print("page #2", _show(page2))
        print("page #3", _show(page3))
        print("prev page", _show(prev_page))
    return 0