from collections.abc import Iterator, Sequence
from pathlib import Path

import pytest

from index_equivalence.store.base import CollectionBase, ValidationResult
from index_equivalence.store.memory import MemoryCollection
from index_equivalence.store.sqlite import SQLiteCollection
from index_equivalence.types import Direction, QueryPredicate, SortSpec

ASC = Direction.ASCENDING
DESC = Direction.DESCENDING


class FixedPredicates:
    """Stands in for PredicateGenerator, handing out a scripted predicate."""

    def __init__(self, predicate: QueryPredicate) -> None:
        self.predicate = predicate
        self.calls = 0

    def generate(self, fields: Sequence[str]) -> QueryPredicate:
        self.calls += 1
        return self.predicate


class FixedSorts:
    """Stands in for SortSpecGenerator, handing out a scripted sort order."""

    def __init__(self, sort: SortSpec) -> None:
        self.sort = sort
        self.calls = 0

    def generate(self, fields: Sequence[str]) -> SortSpec:
        self.calls += 1
        return self.sort


class CorruptMemoryCollection(MemoryCollection):
    """Reports a broken structure and counts any query that slips through."""

    def __init__(self) -> None:
        super().__init__()
        self.queries = 0

    def validate(self) -> ValidationResult:
        return ValidationResult(valid=False, details=["index a_1 has 1 stale entries"])

    def query(self, *args, **kwargs):
        self.queries += 1
        return super().query(*args, **kwargs)


class LossyIndexCollection(MemoryCollection):
    """Index reads silently drop the last matching document."""

    def _query_indexed(self, predicate, sort, spec):
        rows = super()._query_indexed(predicate, sort, spec)
        return rows[:-1]


@pytest.fixture
def sqlite_collection(tmp_path: Path) -> Iterator[SQLiteCollection]:
    with SQLiteCollection(str(tmp_path / "collection.db")) as collection:
        yield collection


@pytest.fixture
def memory_collection() -> MemoryCollection:
    return MemoryCollection()


@pytest.fixture(params=["sqlite", "memory"])
def collection(request: pytest.FixtureRequest, tmp_path: Path) -> Iterator[CollectionBase]:
    """Each collection implementation, freshly reset."""
    if request.param == "memory":
        yield MemoryCollection()
        return
    with SQLiteCollection(str(tmp_path / "collection.db")) as sqlite_collection:
        yield sqlite_collection
