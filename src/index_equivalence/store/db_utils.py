import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager


def connect(db_path: str) -> sqlite3.Connection:
    return sqlite3.connect(db_path)


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Cursor]:
    cursor = conn.cursor()
    try:
        yield cursor
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()


def quote_identifier(name: str) -> str:
    if not name.isidentifier():
        raise ValueError(f"Not a valid SQL identifier: {name!r}")
    return f'"{name}"'
