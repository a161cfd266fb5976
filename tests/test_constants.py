from index_equivalence.constants import (
    DEFAULT_CHECK_PROBABILITY,
    DEFAULT_INSERT_PROBABILITY,
    DEFAULT_MEMBERSHIP_MAX,
    DEFAULT_MUTATION_ITERATIONS,
    DEFAULT_SEED_INSERTS,
    DEFAULT_TRIALS,
    DEFAULT_VALUE_RANGE,
    FIELD_UNIVERSE,
    IDENTITY_FIELD,
)


def test_field_universe_is_five_distinct_fields() -> None:
    assert FIELD_UNIVERSE == ("a", "b", "c", "d", "e")
    assert len(set(FIELD_UNIVERSE)) == 5


def test_identity_field_is_not_a_data_field() -> None:
    assert IDENTITY_FIELD not in FIELD_UNIVERSE


def test_default_workload_values() -> None:
    assert DEFAULT_TRIALS == 5
    assert DEFAULT_SEED_INSERTS == 10_000
    assert DEFAULT_MUTATION_ITERATIONS == 100_000
    assert DEFAULT_CHECK_PROBABILITY == 0.001
    assert DEFAULT_INSERT_PROBABILITY == 0.9


def test_default_value_ranges() -> None:
    assert DEFAULT_VALUE_RANGE == 10
    assert DEFAULT_MEMBERSHIP_MAX == 15
