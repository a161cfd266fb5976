import sqlite3
from pathlib import Path

import pytest

from conftest import ASC, DESC
from index_equivalence.errors import StoreError
from index_equivalence.store.db_utils import quote_identifier, transaction
from index_equivalence.store.sqlite import SQLiteCollection
from index_equivalence.types import MembershipCondition, NaturalOrder


def test_collection_persists_to_file(tmp_path: Path) -> None:
    db_path = str(tmp_path / "persist.db")
    with SQLiteCollection(db_path) as collection:
        collection.insert({"a": 1, "b": 2})
    conn = sqlite3.connect(db_path)
    try:
        assert conn.execute("SELECT a, b FROM documents").fetchall() == [(1, 2)]
    finally:
        conn.close()


def test_unset_columns_are_left_out_of_results(sqlite_collection: SQLiteCollection) -> None:
    sqlite_collection.insert({"b": 4})
    assert sqlite_collection.query({}, {}, NaturalOrder.NATURAL) == [{"b": 4}]


def test_index_is_created_with_sql_directions(sqlite_collection: SQLiteCollection) -> None:
    sqlite_collection.create_index({"a": DESC, "b": ASC})
    sql = sqlite_collection._conn.execute(
        "SELECT sql FROM sqlite_master WHERE type = 'index' AND name = 'ix_a_desc_b_asc'"
    ).fetchone()[0]
    assert '"a" DESC' in sql
    assert '"b" ASC' in sql


def test_explain_reports_forced_index(sqlite_collection: SQLiteCollection) -> None:
    sqlite_collection.create_index({"a": ASC})
    predicate = {"a": MembershipCondition(values=(1, 2))}
    indexed = sqlite_collection.explain(predicate, {"a": DESC}, {"a": ASC})
    natural = sqlite_collection.explain(predicate, {"a": DESC}, NaturalOrder.NATURAL)
    assert any("ix_a_asc" in step for step in indexed.steps)
    assert not any("ix_a_asc" in step for step in natural.steps)


def test_validate_flags_index_dropped_behind_our_back(sqlite_collection: SQLiteCollection) -> None:
    sqlite_collection.create_index({"a": ASC})
    sqlite_collection._conn.execute('DROP INDEX "ix_a_asc"')
    result = sqlite_collection.validate()
    assert not result.valid
    assert any("a_1" in line for line in result.details)


def test_sqlite_errors_surface_as_store_errors(sqlite_collection: SQLiteCollection) -> None:
    sqlite_collection.create_index({"a": ASC})
    sqlite_collection._conn.execute('DROP INDEX "ix_a_asc"')
    with pytest.raises(StoreError, match="no such index"):
        sqlite_collection.query({}, {}, {"a": ASC})


def test_unopenable_database_raises_store_error(tmp_path: Path) -> None:
    with pytest.raises(StoreError, match="Could not open"):
        SQLiteCollection(str(tmp_path / "missing" / "dir" / "x.db"))


def test_reserved_identity_field_is_rejected() -> None:
    with pytest.raises(ValueError, match="reserved"):
        SQLiteCollection(fields=("a", "_id"))


# ---------- db_utils ----------


def test_quote_identifier_rejects_injection() -> None:
    assert quote_identifier("a") == '"a"'
    with pytest.raises(ValueError, match="identifier"):
        quote_identifier('a"; DROP TABLE documents; --')


def test_transaction_rolls_back_on_error() -> None:
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE t (x INTEGER)")
    conn.commit()
    with pytest.raises(RuntimeError):
        with transaction(conn) as cursor:
            cursor.execute("INSERT INTO t VALUES (1)")
            raise RuntimeError("boom")
    assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 0
    conn.close()


def test_transaction_commits_on_success() -> None:
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE t (x INTEGER)")
    with transaction(conn) as cursor:
        cursor.execute("INSERT INTO t VALUES (1)")
    conn.rollback()
    assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 1
    conn.close()
