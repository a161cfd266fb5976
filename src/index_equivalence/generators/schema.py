from collections.abc import Sequence

from index_equivalence.constants import FIELD_UNIVERSE
from index_equivalence.generators.random_source import RandomValueSource


class SchemaGenerator:
    """Picks the active document shape for a trial: a non-empty universe prefix."""

    def __init__(self, source: RandomValueSource, universe: Sequence[str] = FIELD_UNIVERSE) -> None:
        if not universe:
            raise ValueError("field universe must not be empty")
        self.source = source
        self.universe = tuple(universe)

    def generate(self) -> list[str]:
        count = 1 + self.source.next_int(len(self.universe))
        return list(self.universe[:count])
