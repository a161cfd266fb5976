from dataclasses import dataclass

from index_equivalence.constants import (
    DEFAULT_CHECK_PROBABILITY,
    DEFAULT_INSERT_PROBABILITY,
    DEFAULT_MEMBERSHIP_MAX,
    DEFAULT_MUTATION_ITERATIONS,
    DEFAULT_SEED_INSERTS,
    DEFAULT_TRIALS,
    DEFAULT_VALUE_RANGE,
    FIELD_UNIVERSE,
)


@dataclass
class WorkloadConfig:
    """Knobs for one differential-testing run.

    The defaults run five trials, each seeding 10,000 documents and then
    running 100,000 mixed insert/delete iterations, with roughly one check
    per thousand operations.
    """

    trials: int = DEFAULT_TRIALS
    seed_inserts: int = DEFAULT_SEED_INSERTS
    mutation_iterations: int = DEFAULT_MUTATION_ITERATIONS
    check_probability: float = DEFAULT_CHECK_PROBABILITY
    insert_probability: float = DEFAULT_INSERT_PROBABILITY
    value_range: int = DEFAULT_VALUE_RANGE
    membership_max: int = DEFAULT_MEMBERSHIP_MAX
    field_universe: tuple[str, ...] = FIELD_UNIVERSE

    def __post_init__(self) -> None:
        if self.trials < 1:
            raise ValueError(f"trials must be at least 1, got {self.trials}")
        if self.seed_inserts < 0:
            raise ValueError(f"seed_inserts must be non-negative, got {self.seed_inserts}")
        if self.mutation_iterations < 0:
            raise ValueError(
                f"mutation_iterations must be non-negative, got {self.mutation_iterations}"
            )
        for name in ("check_probability", "insert_probability"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.value_range < 1:
            raise ValueError(f"value_range must be at least 1, got {self.value_range}")
        if self.membership_max < 1:
            raise ValueError(f"membership_max must be at least 1, got {self.membership_max}")
        if not self.field_universe:
            raise ValueError("field_universe must name at least one field")
        if len(set(self.field_universe)) != len(self.field_universe):
            raise ValueError(f"field_universe has duplicates: {self.field_universe}")
