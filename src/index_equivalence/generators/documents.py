from collections.abc import Sequence

from index_equivalence.constants import DEFAULT_VALUE_RANGE
from index_equivalence.generators.random_source import RandomValueSource
from index_equivalence.types import Document


class DocumentGenerator:
    """Produces documents, delete templates and predicate values.

    All three draw from the same small integer range so queries hit a realistic
    share of the stored documents.
    """

    def __init__(self, source: RandomValueSource, value_range: int = DEFAULT_VALUE_RANGE) -> None:
        if value_range <= 0:
            raise ValueError(f"value_range must be positive, got {value_range}")
        self.source = source
        self.value_range = value_range

    def value(self) -> int:
        return self.source.next_int(self.value_range)

    def generate(self, fields: Sequence[str]) -> Document:
        return {field: self.value() for field in fields}
