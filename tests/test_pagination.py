import pytest

from queryhooks.pagination import (
    PAGE_SIZE,
    Cursor,
    Entry,
    main,
    new_cursor,
    reset_db,
    select_next_page,
    select_prev_page,
)
from queryhooks.sqlitedb import Database


@pytest.fixture
def db():
    database = Database()
    reset_db(database)
    yield database
    database.close()


def test_new_cursor_of_empty_page():
    assert new_cursor([]) == Cursor()


def test_new_cursor_takes_first_and_last():
    entries = [Entry(id=4), Entry(id=7), Entry(id=9)]
    assert new_cursor(entries) == Cursor(start=4, end=9)


def test_entry_str_is_id():
    assert str(Entry(id=12, text="x")) == "12"


def test_first_page(db):
    page, cursor = select_next_page(db, 0)
    assert len(page) == PAGE_SIZE
    assert page[0].id == 1
    assert all(b.id == a.id + 1 for a, b in zip(page, page[1:]))
    assert cursor == new_cursor(page)


def test_walking_pages_covers_every_entry_once(db):
    seen = []
    cursor = Cursor()
    while True:
        page, cursor = select_next_page(db, cursor.end)
        if not page:
            break
        seen.extend(entry.id for entry in page)
    assert len(seen) == 100
    assert seen == sorted(set(seen))


def test_prev_page_returns_previous_page_in_order(db):
    _, cursor = select_next_page(db, 0)
    page2, cursor = select_next_page(db, cursor.end)
    page3, cursor = select_next_page(db, cursor.end)
    prev, prev_cursor = select_prev_page(db, page3[0].id)
    assert prev == page2
    assert prev_cursor == new_cursor(page2)


def test_prev_page_before_start_is_empty(db):
    page, cursor = select_prev_page(db, 1)
    assert page == []
    assert cursor == Cursor()


def test_main_prints_pages(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "page #1" in out
    assert "prev page" in out