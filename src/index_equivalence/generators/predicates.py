from collections.abc import Sequence

from index_equivalence.constants import DEFAULT_MEMBERSHIP_MAX
from index_equivalence.generators.documents import DocumentGenerator
from index_equivalence.generators.random_source import RandomValueSource
from index_equivalence.types import (
    Condition,
    MembershipCondition,
    QueryPredicate,
    RangeCondition,
)


class PredicateGenerator:
    """Builds a query predicate with one range or membership condition per field."""

    def __init__(
        self,
        source: RandomValueSource,
        documents: DocumentGenerator,
        membership_max: int = DEFAULT_MEMBERSHIP_MAX,
    ) -> None:
        if membership_max <= 0:
            raise ValueError(f"membership_max must be positive, got {membership_max}")
        self.source = source
        self.documents = documents
        self.membership_max = membership_max

    def generate(self, fields: Sequence[str]) -> QueryPredicate:
        return {field: self._condition() for field in fields}

    def _condition(self) -> Condition:
        if self.source.next_bool():
            return self._range()
        return self._membership()

    def _range(self) -> RangeCondition:
        lower, upper = sorted((self.documents.value(), self.documents.value()))
        lower_inclusive = self.source.next_bool()
        upper_inclusive = self.source.next_bool()
        return RangeCondition(
            lower=lower,
            lower_inclusive=lower_inclusive,
            upper=upper,
            upper_inclusive=upper_inclusive,
        )

    def _membership(self) -> MembershipCondition:
        length = self.source.next_int(self.membership_max)
        return MembershipCondition(values=tuple(self.documents.value() for _ in range(length)))
