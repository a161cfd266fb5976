from dataclasses import dataclass
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Directions and scan hints
# ---------------------------------------------------------------------------


class Direction(Enum):
    ASCENDING = 1
    DESCENDING = -1


class NaturalOrder(Enum):
    """Query hint requesting an unindexed scan in storage order."""

    NATURAL = "natural"


# ---------------------------------------------------------------------------
# Field conditions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RangeCondition:
    lower: int
    lower_inclusive: bool
    upper: int
    upper_inclusive: bool

    def __post_init__(self) -> None:
        if self.lower > self.upper:
            raise ValueError(f"range lower bound {self.lower} exceeds upper bound {self.upper}")

    def matches(self, value: int) -> bool:
        above = value >= self.lower if self.lower_inclusive else value > self.lower
        below = value <= self.upper if self.upper_inclusive else value < self.upper
        return above and below

    def to_query(self) -> dict[str, int]:
        lower_op = "$gte" if self.lower_inclusive else "$gt"
        upper_op = "$lte" if self.upper_inclusive else "$lt"
        return {lower_op: self.lower, upper_op: self.upper}


@dataclass(frozen=True)
class MembershipCondition:
    values: tuple[int, ...]

    def matches(self, value: int) -> bool:
        return value in self.values

    def to_query(self) -> dict[str, list[int]]:
        return {"$in": list(self.values)}


# ---------------------------------------------------------------------------
# TypeAliases
# ---------------------------------------------------------------------------

Condition = RangeCondition | MembershipCondition

# Field name → value; the store adds an identity field on insert
Document = dict[str, Any]

# Field name → direction, in key order
IndexSpec = dict[str, Direction]
SortSpec = dict[str, Direction]

QueryPredicate = dict[str, Condition]

# What a query may be forced through
ForceIndex = IndexSpec | NaturalOrder


def predicate_to_query(predicate: QueryPredicate) -> dict[str, dict[str, Any]]:
    """Render a predicate in the `$gte`/`$in` operator notation."""
    return {field: condition.to_query() for field, condition in predicate.items()}


def spec_to_query(spec: IndexSpec | SortSpec) -> dict[str, int]:
    """Render a direction spec as `{field: 1 | -1}`."""
    return {field: direction.value for field, direction in spec.items()}
