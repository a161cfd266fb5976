"""Template script for a programmatic differential index check.

Edit the config section below, then run:

    uv run python run_check.py

For a long background soak with a log file:

    nohup uv run python run_check.py > /dev/null 2>&1 &
    tail -f data/index_check.log

A failure prints the seed; put it in SEED below to replay the exact run.
"""

from pathlib import Path

from index_equivalence.errors import EquivalenceViolation, IntegrityViolation
from index_equivalence.generators.random_source import RandomValueSource
from index_equivalence.harness.config import WorkloadConfig
from index_equivalence.harness.driver import WorkloadDriver
from index_equivalence.harness.report import log_summary_table
from index_equivalence.infra.logs import setup_logging
from index_equivalence.store.memory import MemoryCollection
from index_equivalence.store.sqlite import SQLiteCollection

# ============================================================
# CONFIG
# ============================================================

SEED = 20261019
LOG_FILE = Path("data/index_check.log")

config = WorkloadConfig(
    trials=10,
    seed_inserts=5_000,
    mutation_iterations=50_000,
    check_probability=0.002,
)

# ============================================================
# RUN: both collections, same seed
# ============================================================

if __name__ == "__main__":
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    logger = setup_logging(log_file=LOG_FILE)

    for label, collection in (
        ("sqlite", SQLiteCollection(fields=config.field_universe)),
        ("memory", MemoryCollection(config.field_universe)),
    ):
        logger.info("=" * 60)
        logger.info("Collection: %s", label)
        logger.info("=" * 60)
        try:
            outcome = WorkloadDriver(collection, RandomValueSource(SEED), config).run()
        except (EquivalenceViolation, IntegrityViolation) as error:
            logger.error("%s FAILED (seed=%d)\n%s", label, SEED, error)
            raise SystemExit(1)
        finally:
            if isinstance(collection, SQLiteCollection):
                collection.close()
        log_summary_table(logger, outcome)
