import logging
from collections.abc import Sequence
from dataclasses import dataclass

from index_equivalence.errors import EquivalenceViolation, IntegrityViolation
from index_equivalence.generators.directions import SortSpecGenerator
from index_equivalence.generators.predicates import PredicateGenerator
from index_equivalence.store.base import Collection
from index_equivalence.types import IndexSpec, NaturalOrder, QueryPredicate, SortSpec

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    predicate: QueryPredicate
    sort: SortSpec
    result_size: int


class EquivalenceOracle:
    """Compares an index-forced query with a natural-order scan of the same query.

    A check first asks the collection to validate itself, then draws a fresh
    predicate and sort order, runs both query paths with document identity
    excluded and requires the two sequences to be equal element by element.
    It only reports that the paths diverged, never why.
    """

    def __init__(
        self,
        collection: Collection,
        predicates: PredicateGenerator,
        sorts: SortSpecGenerator,
    ) -> None:
        self.collection = collection
        self.predicates = predicates
        self.sorts = sorts

    def check(self, fields: Sequence[str], index_spec: IndexSpec) -> CheckResult:
        validation = self.collection.validate()
        if not validation.valid:
            raise IntegrityViolation(validation.details)

        predicate = self.predicates.generate(fields)
        sort = self.sorts.generate(fields)

        indexed = self.collection.query(predicate, sort, index_spec, exclude_identity=True)
        natural = self.collection.query(
            predicate, sort, NaturalOrder.NATURAL, exclude_identity=True
        )

        if indexed != natural:
            plans = {
                "indexed": self.collection.explain(predicate, sort, index_spec),
                "natural": self.collection.explain(predicate, sort, NaturalOrder.NATURAL),
            }
            raise EquivalenceViolation(predicate, sort, index_spec, indexed, natural, plans)

        logger.debug("Check passed: %d matching documents", len(indexed))
        return CheckResult(predicate=predicate, sort=sort, result_size=len(indexed))
