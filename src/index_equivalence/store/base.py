from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from index_equivalence.constants import FIELD_UNIVERSE, IDENTITY_FIELD
from index_equivalence.errors import StoreError
from index_equivalence.types import (
    Document,
    ForceIndex,
    IndexSpec,
    NaturalOrder,
    QueryPredicate,
    SortSpec,
)


@dataclass
class ValidationResult:
    valid: bool
    details: list[str] = field(default_factory=list)


@dataclass
class QueryPlan:
    """Human-readable description of how a query was executed."""

    index_name: str | None  # None for a natural-order scan
    steps: list[str]

    def __str__(self) -> str:
        return " -> ".join(self.steps)


class Collection(Protocol):
    def reset(self) -> None: ...
    def create_index(self, spec: IndexSpec) -> str: ...
    def insert(self, doc: Document) -> None: ...
    def delete_by_example(self, template: Document, just_one: bool = False) -> int: ...
    def query(
        self,
        predicate: QueryPredicate,
        sort: SortSpec,
        force_index: ForceIndex,
        exclude_identity: bool = True,
    ) -> list[Document]: ...
    def explain(
        self, predicate: QueryPredicate, sort: SortSpec, force_index: ForceIndex
    ) -> QueryPlan: ...
    def validate(self) -> ValidationResult: ...
    def count(self) -> int: ...


def index_name(spec: IndexSpec) -> str:
    """Name an index after its key pattern, e.g. `a_1_b_-1`."""
    return "_".join(f"{field_name}_{direction.value}" for field_name, direction in spec.items())


class CollectionBase(ABC):
    """Shared argument checking and query dispatch for concrete collections.

    Subclasses implement the two execution paths (`_query_indexed` and
    `_query_natural`); `query` checks field names, routes on the hint and
    strips the identity field when asked to.
    """

    def __init__(self, fields: Sequence[str] = FIELD_UNIVERSE) -> None:
        if not fields:
            raise ValueError("collection needs at least one field")
        if IDENTITY_FIELD in fields:
            raise ValueError(f"{IDENTITY_FIELD!r} is reserved for document identity")
        self.fields = tuple(fields)

    @abstractmethod
    def reset(self) -> None: ...

    @abstractmethod
    def create_index(self, spec: IndexSpec) -> str: ...

    @abstractmethod
    def insert(self, doc: Document) -> None: ...

    @abstractmethod
    def delete_by_example(self, template: Document, just_one: bool = False) -> int:
        """Remove documents equal to `template` on its fields; all of them unless `just_one`."""
        ...

    @abstractmethod
    def explain(
        self, predicate: QueryPredicate, sort: SortSpec, force_index: ForceIndex
    ) -> QueryPlan: ...

    @abstractmethod
    def validate(self) -> ValidationResult: ...

    @abstractmethod
    def count(self) -> int: ...

    @abstractmethod
    def _query_indexed(
        self, predicate: QueryPredicate, sort: SortSpec, spec: IndexSpec
    ) -> list[Document]:
        """Return matching documents, identity included, reading through the index."""
        ...

    @abstractmethod
    def _query_natural(self, predicate: QueryPredicate, sort: SortSpec) -> list[Document]:
        """Return matching documents, identity included, from a full scan."""
        ...

    def query(
        self,
        predicate: QueryPredicate,
        sort: SortSpec,
        force_index: ForceIndex,
        exclude_identity: bool = True,
    ) -> list[Document]:
        self._check_fields(predicate)
        self._check_fields(sort)
        if force_index is NaturalOrder.NATURAL:
            rows = self._query_natural(predicate, sort)
        else:
            rows = self._query_indexed(predicate, sort, force_index)
        if exclude_identity:
            return [{k: v for k, v in row.items() if k != IDENTITY_FIELD} for row in rows]
        return rows

    def _check_fields(self, names: Iterable[str]) -> None:
        unknown = [name for name in names if name not in self.fields]
        if unknown:
            raise StoreError(f"Unknown field(s) {unknown}; collection fields are {list(self.fields)}")

    def _check_index_spec(self, spec: IndexSpec) -> None:
        if not spec:
            raise StoreError("Index key pattern must name at least one field")
        self._check_fields(spec)
