from __future__ import annotations

import sqlite3
import threading

import pytest

from intake.sqlite_utils import Database, StoreUnavailable, build_insert, quote_ident


@pytest.fixture
def small_db(tmp_path):
    db = Database(str(tmp_path / "pool.db"), pool_size=1, timeout=0.2)
    db.execute_script('CREATE TABLE "t" ("id" INTEGER PRIMARY KEY AUTOINCREMENT, "v" TEXT UNIQUE);')
    yield db
    db.close()


def test_insert_returns_generated_id(small_db):
    assert small_db.insert("t", ["v"], ["a"], returning="id") == 1
    assert small_db.insert("t", ["v"], ["b"], returning="id") == 2
    assert small_db.insert("t", ["v"], ["c"]) is None


def test_connection_is_released_and_rolled_back_on_error(small_db):
    with pytest.raises(sqlite3.IntegrityError):
        with small_db.connection() as conn:
            conn.execute('INSERT INTO "t" ("v") VALUES (?)', ["x"])
            conn.execute('INSERT INTO "t" ("v") VALUES (?)', ["x"])

    # pool of one: a leaked connection would make this time out
    assert small_db.fetch_all('SELECT * FROM "t"') == []


def test_exhausted_pool_raises_store_unavailable(small_db):
    held = threading.Event()
    release = threading.Event()

    def _hold():
        with small_db.connection():
            held.set()
            release.wait(5)

    worker = threading.Thread(target=_hold)
    worker.start()
    try:
        held.wait(5)
        with pytest.raises(StoreUnavailable):
            small_db.fetch_all('SELECT * FROM "t"')
    finally:
        release.set()
        worker.join()
    assert small_db.fetch_all('SELECT * FROM "t"') == []


def test_value_count_must_match_columns(small_db):
    with pytest.raises(ValueError):
        small_db.insert("t", ["v"], ["a", "b"])


def test_build_insert():
    assert build_insert("freelance", ["title", "images"], returning="id") == (
        'INSERT INTO "freelance" ("title", "images") VALUES (?, ?) RETURNING "id"'
    )


@pytest.mark.parametrize("name", ["", "1abc", 'a"b', "a; DROP TABLE x"])
def test_quote_ident_rejects_unsafe_names(name):
    with pytest.raises(ValueError):
        quote_ident(name)


def test_casefold_sql_function(small_db):
    small_db.insert("t", ["v"], ["ÉCOLE"])
    small_db.insert("t", ["v"], [None])

    rows = small_db.fetch_all('SELECT casefold("v") AS folded FROM "t" ORDER BY "id"')

    assert [r["folded"] for r in rows] == ["école", None]
