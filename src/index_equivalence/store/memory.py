import bisect
import logging
from collections.abc import Iterator, Sequence

from index_equivalence.constants import FIELD_UNIVERSE, IDENTITY_FIELD
from index_equivalence.errors import StoreError
from index_equivalence.store.base import CollectionBase, QueryPlan, ValidationResult, index_name
from index_equivalence.types import (
    Condition,
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

Key = tuple[int, ...]


def _encode(doc: Document, spec: IndexSpec | SortSpec) -> Key:
    # Negating descending components makes plain tuple order match the spec
    return tuple(doc[field_name] * direction.value for field_name, direction in spec.items())


def _matches(doc: Document, predicate: QueryPredicate) -> bool:
    return all(
        field_name in doc and condition.matches(doc[field_name])
        for field_name, condition in predicate.items()
    )


class SortedIndex:
    """Compound index kept as a sorted list of (encoded key, document id) entries."""

    __slots__ = ("spec", "name", "entries")

    def __init__(self, spec: IndexSpec) -> None:
        self.spec = dict(spec)
        self.name = index_name(spec)
        self.entries: list[tuple[Key, int]] = []

    def key(self, doc: Document) -> Key:
        missing = [field_name for field_name in self.spec if field_name not in doc]
        if missing:
            raise StoreError(f"Document {doc} lacks indexed field(s) {missing} for {self.name}")
        return _encode(doc, self.spec)

    def add(self, doc_id: int, doc: Document) -> None:
        bisect.insort(self.entries, (self.key(doc), doc_id))

    def remove(self, doc_id: int, doc: Document) -> None:
        entry = (self.key(doc), doc_id)
        position = bisect.bisect_left(self.entries, entry)
        if position == len(self.entries) or self.entries[position] != entry:
            raise StoreError(f"Index {self.name} has no entry for document {doc_id}")
        del self.entries[position]

    def leading_slices(self, condition: Condition | None) -> list[tuple[int, int]]:
        """Entry slices whose leading key component can satisfy `condition`."""
        if condition is None:
            return [(0, len(self.entries))]
        sign = next(iter(self.spec.values())).value
        if isinstance(condition, RangeCondition):
            low = condition.lower if condition.lower_inclusive else condition.lower + 1
            high = condition.upper if condition.upper_inclusive else condition.upper - 1
            if low > high:
                return []
            low, high = sorted((low * sign, high * sign))
            return [self._leading_span(low, high)]
        encoded = sorted({value * sign for value in condition.values})
        return [self._leading_span(value, value) for value in encoded]

    def _leading_span(self, low: int, high: int) -> tuple[int, int]:
        start = bisect.bisect_left(self.entries, ((low,),))
        end = bisect.bisect_left(self.entries, ((high + 1,),))
        return start, end


class MemoryCollection(CollectionBase):
    """In-process collection with sorted-list compound indexes.

    Documents live in a dict keyed by an increasing id, so a natural-order scan
    walks them in insertion order. Indexed reads seek the leading index field
    and then filter the remaining conditions; when the requested sort is the
    index order (or its exact reverse) no sort step runs.
    """

    def __init__(self, fields: Sequence[str] = FIELD_UNIVERSE) -> None:
        super().__init__(fields)
        self.reset()

    def reset(self) -> None:
        self._documents: dict[int, Document] = {}
        self._indexes: dict[str, SortedIndex] = {}
        self._next_id = 1

    def create_index(self, spec: IndexSpec) -> str:
        self._check_index_spec(spec)
        index = SortedIndex(spec)
        if index.name in self._indexes:
            raise StoreError(f"Index {index.name} already exists")
        for doc_id, doc in self._documents.items():
            index.add(doc_id, doc)
        self._indexes[index.name] = index
        logger.debug("Created index %s over %d documents", index.name, len(self._documents))
        return index.name

    def insert(self, doc: Document) -> None:
        self._check_fields(doc)
        doc_id = self._next_id
        stored = dict(doc)
        for index in self._indexes.values():
            index.key(stored)
        self._next_id += 1
        self._documents[doc_id] = stored
        for index in self._indexes.values():
            index.add(doc_id, stored)

    def delete_by_example(self, template: Document, just_one: bool = False) -> int:
        self._check_fields(template)
        doomed = [
            doc_id
            for doc_id, doc in self._documents.items()
            if all(doc.get(name) == value for name, value in template.items())
        ]
        if just_one:
            doomed = doomed[:1]
        for doc_id in doomed:
            doc = self._documents.pop(doc_id)
            for index in self._indexes.values():
                index.remove(doc_id, doc)
        return len(doomed)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _query_indexed(
        self, predicate: QueryPredicate, sort: SortSpec, spec: IndexSpec
    ) -> list[Document]:
        index = self._index(spec)
        rows = [
            self._with_identity(doc_id)
            for doc_id in self._index_scan(index, predicate)
            if _matches(self._documents[doc_id], predicate)
        ]
        order = self._index_order(index, sort)
        if order == "forward":
            return rows
        if order == "reverse":
            rows.reverse()
            return rows
        return self._sorted(rows, sort)

    def _query_natural(self, predicate: QueryPredicate, sort: SortSpec) -> list[Document]:
        rows = [
            self._with_identity(doc_id)
            for doc_id, doc in self._documents.items()
            if _matches(doc, predicate)
        ]
        return self._sorted(rows, sort)

    def explain(
        self, predicate: QueryPredicate, sort: SortSpec, force_index: ForceIndex
    ) -> QueryPlan:
        if force_index is NaturalOrder.NATURAL:
            steps = [f"COLLSCAN {len(self._documents)} documents"]
            if sort:
                steps.append(f"SORT {index_name(sort)}")
            return QueryPlan(index_name=None, steps=steps)
        index = self._index(force_index)
        leading = next(iter(index.spec))
        slices = index.leading_slices(predicate.get(leading))
        scanned = sum(end - start for start, end in slices)
        steps = [f"IXSCAN {index.name} ({len(slices)} span(s), {scanned} keys)", "FETCH"]
        order = self._index_order(index, sort)
        if order is None and sort:
            steps.append(f"SORT {index_name(sort)}")
        elif order == "reverse":
            steps[0] = steps[0].replace("IXSCAN", "IXSCAN backward", 1)
        return QueryPlan(index_name=index.name, steps=steps)

    def validate(self) -> ValidationResult:
        details: list[str] = []
        for index in self._indexes.values():
            if len(index.entries) != len(self._documents):
                details.append(
                    f"index {index.name} has {len(index.entries)} entries "
                    f"for {len(self._documents)} documents"
                )
            if any(left > right for left, right in zip(index.entries, index.entries[1:])):
                details.append(f"index {index.name} entries are out of order")
            expected = {(index.key(doc), doc_id) for doc_id, doc in self._documents.items()}
            stale = set(index.entries) - expected
            missing = expected - set(index.entries)
            if stale:
                details.append(f"index {index.name} has {len(stale)} stale entries")
            if missing:
                details.append(f"index {index.name} is missing {len(missing)} entries")
        return ValidationResult(valid=not details, details=details or ["ok"])

    def count(self) -> int:
        return len(self._documents)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _index(self, spec: IndexSpec) -> SortedIndex:
        name = index_name(spec)
        if name not in self._indexes:
            raise StoreError(f"Cannot force index {name}: no such index")
        return self._indexes[name]

    def _index_scan(self, index: SortedIndex, predicate: QueryPredicate) -> Iterator[int]:
        leading = next(iter(index.spec))
        for start, end in index.leading_slices(predicate.get(leading)):
            for _, doc_id in index.entries[start:end]:
                yield doc_id

    @staticmethod
    def _index_order(index: SortedIndex, sort: SortSpec) -> str | None:
        if list(sort) != list(index.spec):
            return None
        if all(sort[name] is index.spec[name] for name in sort):
            return "forward"
        if all(sort[name] is not index.spec[name] for name in sort):
            return "reverse"
        return None

    def _with_identity(self, doc_id: int) -> Document:
        return {IDENTITY_FIELD: doc_id, **self._documents[doc_id]}

    @staticmethod
    def _sorted(rows: list[Document], sort: SortSpec) -> list[Document]:
        if not sort:
            return rows
        return sorted(rows, key=lambda row: _encode(row, sort))
