import logging
import sqlite3
from collections.abc import Sequence
from typing import Any

from index_equivalence.constants import FIELD_UNIVERSE, IDENTITY_FIELD
from index_equivalence.errors import StoreError
from index_equivalence.store.base import CollectionBase, QueryPlan, ValidationResult, index_name
from index_equivalence.store.db_utils import connect, quote_identifier, transaction
from index_equivalence.types import (
    Direction,
    Document,
    ForceIndex,
    IndexSpec,
    MembershipCondition,
    NaturalOrder,
    QueryPredicate,
    RangeCondition,
    SortSpec,
)

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "documents"
INDEX_PREFIX = "ix_"


def _sql_index_name(spec: IndexSpec) -> str:
    # `a_1_b_-1` is not a bare identifier, so spell the directions out
    parts = [
        f"{field_name}_{'asc' if direction is Direction.ASCENDING else 'desc'}"
        for field_name, direction in spec.items()
    ]
    return INDEX_PREFIX + "_".join(parts)


class SQLiteCollection(CollectionBase):
    """Document collection stored in one SQLite table.

    Each field is an INTEGER column and `_id` is the rowid. Forced index reads
    use `INDEXED BY`, natural-order scans use `NOT INDEXED`, and validation runs
    `PRAGMA integrity_check`, which cross-checks every index against the table.

    Args:
        db_path: SQLite database path. Defaults to a private in-memory database.
        fields: Column names available to documents.
        table: Table name holding the documents.
    """

    def __init__(
        self,
        db_path: str = ":memory:",
        fields: Sequence[str] = FIELD_UNIVERSE,
        table: str = DEFAULT_TABLE,
    ) -> None:
        super().__init__(fields)
        self.db_path = db_path
        self.table = table
        self._table_sql = quote_identifier(table)
        self._columns = {name: quote_identifier(name) for name in self.fields}
        self._indexes: dict[str, str] = {}  # key pattern name -> SQL index name
        try:
            self._conn = connect(db_path)
        except sqlite3.Error as error:
            raise StoreError(f"Could not open SQLite database {db_path!r}: {error}") from error
        self.reset()

    def __enter__(self) -> "SQLiteCollection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def reset(self) -> None:
        column_defs = ", ".join(f"{column} INTEGER" for column in self._columns.values())
        self._write(f"DROP TABLE IF EXISTS {self._table_sql}")
        self._write(
            f"CREATE TABLE {self._table_sql} ("
            f"{quote_identifier(IDENTITY_FIELD)} INTEGER PRIMARY KEY AUTOINCREMENT, {column_defs})"
        )
        self._indexes.clear()

    def create_index(self, spec: IndexSpec) -> str:
        self._check_index_spec(spec)
        name = index_name(spec)
        if name in self._indexes:
            raise StoreError(f"Index {name} already exists on {self.table}")
        sql_name = _sql_index_name(spec)
        key_columns = ", ".join(
            f"{self._columns[field_name]} {'ASC' if direction is Direction.ASCENDING else 'DESC'}"
            for field_name, direction in spec.items()
        )
        self._write(f"CREATE INDEX {quote_identifier(sql_name)} ON {self._table_sql} ({key_columns})")
        self._indexes[name] = sql_name
        logger.debug("Created index %s as %s", name, sql_name)
        return name

    def insert(self, doc: Document) -> None:
        self._check_fields(doc)
        if not doc:
            self._write(f"INSERT INTO {self._table_sql} DEFAULT VALUES")
            return
        columns = ", ".join(self._columns[name] for name in doc)
        placeholders = ", ".join("?" for _ in doc)
        self._write(
            f"INSERT INTO {self._table_sql} ({columns}) VALUES ({placeholders})",
            tuple(doc.values()),
        )

    def delete_by_example(self, template: Document, just_one: bool = False) -> int:
        self._check_fields(template)
        clauses = [f"{self._columns[name]} = ?" for name in template]
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        if just_one:
            identity = quote_identifier(IDENTITY_FIELD)
            where = (
                f" WHERE {identity} IN "
                f"(SELECT {identity} FROM {self._table_sql}{where} ORDER BY {identity} LIMIT 1)"
            )
        return self._write(f"DELETE FROM {self._table_sql}{where}", tuple(template.values()))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _query_indexed(
        self, predicate: QueryPredicate, sort: SortSpec, spec: IndexSpec
    ) -> list[Document]:
        return self._select(predicate, sort, f"INDEXED BY {quote_identifier(self._sql_index(spec))}")

    def _query_natural(self, predicate: QueryPredicate, sort: SortSpec) -> list[Document]:
        return self._select(predicate, sort, "NOT INDEXED")

    def explain(
        self, predicate: QueryPredicate, sort: SortSpec, force_index: ForceIndex
    ) -> QueryPlan:
        if force_index is NaturalOrder.NATURAL:
            hint, name = "NOT INDEXED", None
        else:
            name = index_name(force_index)
            hint = f"INDEXED BY {quote_identifier(self._sql_index(force_index))}"
        sql, params = self._select_sql(predicate, sort, hint)
        rows = self._read(f"EXPLAIN QUERY PLAN {sql}", params)
        return QueryPlan(index_name=name, steps=[row[-1] for row in rows])

    def validate(self) -> ValidationResult:
        rows = self._read("PRAGMA integrity_check")
        details = [row[0] for row in rows]
        valid = details == ["ok"]
        existing = {
            row[0]
            for row in self._read(
                "SELECT name FROM sqlite_master WHERE type = 'index' AND tbl_name = ?",
                (self.table,),
            )
        }
        for name, sql_name in self._indexes.items():
            if sql_name not in existing:
                valid = False
                details.append(f"index {name} ({sql_name}) is missing from the schema")
        return ValidationResult(valid=valid, details=details)

    def count(self) -> int:
        return self._read(f"SELECT COUNT(*) FROM {self._table_sql}")[0][0]

    # ------------------------------------------------------------------
    # SQL helpers
    # ------------------------------------------------------------------

    def _sql_index(self, spec: IndexSpec) -> str:
        name = index_name(spec)
        if name not in self._indexes:
            raise StoreError(f"Cannot force index {name}: no such index on {self.table}")
        return self._indexes[name]

    def _where(self, predicate: QueryPredicate) -> tuple[str, list[int]]:
        clauses: list[str] = []
        params: list[int] = []
        for field_name, condition in predicate.items():
            column = self._columns[field_name]
            if isinstance(condition, RangeCondition):
                lower_op = ">=" if condition.lower_inclusive else ">"
                upper_op = "<=" if condition.upper_inclusive else "<"
                clauses.append(f"{column} {lower_op} ? AND {column} {upper_op} ?")
                params.extend([condition.lower, condition.upper])
            elif isinstance(condition, MembershipCondition):
                placeholders = ", ".join("?" for _ in condition.values)
                clauses.append(f"{column} IN ({placeholders})")
                params.extend(condition.values)
            else:
                raise StoreError(f"Unsupported condition on {field_name}: {condition!r}")
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def _select_sql(
        self, predicate: QueryPredicate, sort: SortSpec, hint: str
    ) -> tuple[str, list[int]]:
        columns = ", ".join([quote_identifier(IDENTITY_FIELD), *self._columns.values()])
        where, params = self._where(predicate)
        order_by = ""
        if sort:
            order_by = " ORDER BY " + ", ".join(
                f"{self._columns[field_name]} {'ASC' if direction is Direction.ASCENDING else 'DESC'}"
                for field_name, direction in sort.items()
            )
        return f"SELECT {columns} FROM {self._table_sql} {hint}{where}{order_by}", params

    def _select(self, predicate: QueryPredicate, sort: SortSpec, hint: str) -> list[Document]:
        sql, params = self._select_sql(predicate, sort, hint)
        names = [IDENTITY_FIELD, *self.fields]
        # Unset fields are NULL columns; leave them out like absent keys
        return [
            {name: value for name, value in zip(names, row) if value is not None}
            for row in self._read(sql, params)
        ]

    def _write(self, sql: str, params: Sequence[Any] = ()) -> int:
        try:
            with transaction(self._conn) as cursor:
                cursor.execute(sql, params)
                return cursor.rowcount
        except sqlite3.Error as error:
            raise StoreError(f"{error} (while running: {sql})") from error

    def _read(self, sql: str, params: Sequence[Any] = ()) -> list[tuple[Any, ...]]:
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as error:
            raise StoreError(f"{error} (while running: {sql})") from error
