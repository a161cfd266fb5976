# ---------------------------------------------------------------------------
# Document shape
# ---------------------------------------------------------------------------

FIELD_UNIVERSE: tuple[str, ...] = ("a", "b", "c", "d", "e")
IDENTITY_FIELD = "_id"

# Field values are drawn from [0, DEFAULT_VALUE_RANGE)
DEFAULT_VALUE_RANGE: int = 10

# Membership lists hold [0, DEFAULT_MEMBERSHIP_MAX) values
DEFAULT_MEMBERSHIP_MAX: int = 15

# ---------------------------------------------------------------------------
# Workload defaults
# ---------------------------------------------------------------------------

DEFAULT_TRIALS: int = 5
DEFAULT_SEED_INSERTS: int = 10_000
DEFAULT_MUTATION_ITERATIONS: int = 100_000
DEFAULT_CHECK_PROBABILITY: float = 0.001
DEFAULT_INSERT_PROBABILITY: float = 0.9

# Rows shown per sequence when a violation is rendered
DIAGNOSTIC_ROW_LIMIT: int = 50
