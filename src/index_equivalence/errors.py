import json
from typing import Any

from index_equivalence.constants import DIAGNOSTIC_ROW_LIMIT
from index_equivalence.types import (
    Document,
    IndexSpec,
    QueryPredicate,
    SortSpec,
    predicate_to_query,
    spec_to_query,
)


class StoreError(Exception):
    """Any failure reported by the collection under test."""


class IntegrityViolation(AssertionError):
    def __init__(self, details: list[str]):
        self.details = details
        super().__init__(
            "Collection failed structural validation:\n"
            + "\n".join(f"  {line}" for line in details)
        )


def _render_rows(rows: list[Document]) -> str:
    shown = [json.dumps(row, sort_keys=True) for row in rows[:DIAGNOSTIC_ROW_LIMIT]]
    if len(rows) > DIAGNOSTIC_ROW_LIMIT:
        shown.append(f"... {len(rows) - DIAGNOSTIC_ROW_LIMIT} more")
    return "\n".join(f"    {line}" for line in shown) or "    (empty)"


def _first_difference(indexed: list[Document], natural: list[Document]) -> int:
    for position, (left, right) in enumerate(zip(indexed, natural)):
        if left != right:
            return position
    return min(len(indexed), len(natural))


class EquivalenceViolation(AssertionError):
    """Indexed and natural-order results differ for the same query."""

    def __init__(
        self,
        predicate: QueryPredicate,
        sort: SortSpec,
        index_spec: IndexSpec,
        indexed: list[Document],
        natural: list[Document],
        plans: dict[str, Any] | None = None,
    ):
        self.predicate = predicate
        self.sort = sort
        self.index_spec = index_spec
        self.indexed = indexed
        self.natural = natural
        self.plans = plans or {}
        self.first_difference = _first_difference(indexed, natural)

        lines = [
            "Indexed and natural-order results differ",
            f"  predicate:  {json.dumps(predicate_to_query(predicate))}",
            f"  sort:       {json.dumps(spec_to_query(sort))}",
            f"  index:      {json.dumps(spec_to_query(index_spec))}",
            f"  lengths:    indexed={len(indexed)} natural={len(natural)}",
            f"  first diff: position {self.first_difference}",
        ]
        for label, plan in self.plans.items():
            lines.append(f"  {label} plan: {plan}")
        lines.append("  indexed:")
        lines.append(_render_rows(indexed))
        lines.append("  natural:")
        lines.append(_render_rows(natural))
        super().__init__("\n".join(lines))
