from collections.abc import Sequence

from index_equivalence.generators.random_source import RandomValueSource
from index_equivalence.types import Direction


def _random_directions(source: RandomValueSource, fields: Sequence[str]) -> dict[str, Direction]:
    return {
        field: Direction.ASCENDING if source.next_bool() else Direction.DESCENDING
        for field in fields
    }


class IndexSpecGenerator:
    """Draws the compound index key pattern for a trial."""

    def __init__(self, source: RandomValueSource) -> None:
        self.source = source

    def generate(self, fields: Sequence[str]) -> dict[str, Direction]:
        return _random_directions(self.source, fields)


class SortSpecGenerator:
    """Draws a sort order for one check, independent of the index directions."""

    def __init__(self, source: RandomValueSource) -> None:
        self.source = source

    def generate(self, fields: Sequence[str]) -> dict[str, Direction]:
        return _random_directions(self.source, fields)
