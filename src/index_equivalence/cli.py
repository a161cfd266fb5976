"""Command-line entry point for the differential index checker.

Examples:
  # Default run: five trials against an in-memory SQLite collection
  index-check

  # Reproduce a failure with its reported seed
  index-check --seed 1234567890

  # Quick smoke run against the pure-Python collection
  index-check --backend memory --trials 2 --seed-inserts 500 --mutations 2000
"""

import argparse
import logging
import time

from index_equivalence.errors import EquivalenceViolation, IntegrityViolation, StoreError
from index_equivalence.generators.random_source import RandomValueSource
from index_equivalence.harness.config import WorkloadConfig
from index_equivalence.harness.driver import WorkloadDriver
from index_equivalence.harness.report import log_summary_table
from index_equivalence.infra.logs import ROOT_LOGGER_NAME, setup_logging
from index_equivalence.store.base import CollectionBase
from index_equivalence.store.memory import MemoryCollection
from index_equivalence.store.sqlite import SQLiteCollection

BACKENDS = ("sqlite", "memory")

EXIT_OK = 0
EXIT_FAILURE = 1


def _default_seed() -> int:
    return time.time_ns() % 2**32


def build_parser() -> argparse.ArgumentParser:
    defaults = WorkloadConfig()
    parser = argparse.ArgumentParser(
        prog="index-check",
        description="Compare index-forced query results with natural-order scans under random workloads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: time based)")
    parser.add_argument(
        "--trials", type=int, default=defaults.trials, help=f"Trials to run (default: {defaults.trials})"
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default="sqlite",
        help="Collection implementation under test (default: sqlite)",
    )
    parser.add_argument(
        "--db",
        default=":memory:",
        help="SQLite database path for the sqlite backend (default: in-memory)",
    )
    parser.add_argument(
        "--seed-inserts",
        type=int,
        default=defaults.seed_inserts,
        help=f"Inserts in the seeding phase (default: {defaults.seed_inserts})",
    )
    parser.add_argument(
        "--mutations",
        type=int,
        default=defaults.mutation_iterations,
        help=f"Iterations in the mixed phase (default: {defaults.mutation_iterations})",
    )
    parser.add_argument(
        "--check-probability",
        type=float,
        default=defaults.check_probability,
        help=f"Chance of a check after each operation (default: {defaults.check_probability})",
    )
    parser.add_argument("--log-file", default=None, help="Also write DEBUG logs to this file")
    parser.add_argument("--verbose", action="store_true", help="Log every check at DEBUG level")
    return parser


def _open_collection(backend: str, db_path: str, fields: tuple[str, ...]) -> CollectionBase:
    if backend == "memory":
        return MemoryCollection(fields)
    return SQLiteCollection(db_path, fields)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logging(verbose=args.verbose, log_file=args.log_file)
    cli_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.cli")

    try:
        config = WorkloadConfig(
            trials=args.trials,
            seed_inserts=args.seed_inserts,
            mutation_iterations=args.mutations,
            check_probability=args.check_probability,
        )
        seed = args.seed if args.seed is not None else _default_seed()
        source = RandomValueSource(seed)
    except ValueError as error:
        cli_logger.error("Invalid configuration: %s", error)
        return EXIT_FAILURE

    cli_logger.info("=" * 60)
    cli_logger.info("INDEX CHECK START | seed=%d | backend=%s", seed, args.backend)
    cli_logger.info(
        "Trials: %d | seed inserts: %d | mutations: %d",
        config.trials,
        config.seed_inserts,
        config.mutation_iterations,
    )
    cli_logger.info("=" * 60)

    collection: CollectionBase | None = None
    try:
        collection = _open_collection(args.backend, args.db, config.field_universe)
        outcome = WorkloadDriver(collection, source, config).run()
    except IntegrityViolation as error:
        cli_logger.error("INTEGRITY VIOLATION (seed=%d)\n%s", seed, error)
        return EXIT_FAILURE
    except EquivalenceViolation as error:
        cli_logger.error("EQUIVALENCE VIOLATION (seed=%d)\n%s", seed, error)
        return EXIT_FAILURE
    except StoreError as error:
        cli_logger.error("STORE ERROR (seed=%d): %s", seed, error)
        return EXIT_FAILURE
    finally:
        if isinstance(collection, SQLiteCollection):
            collection.close()

    log_summary_table(logger, outcome)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
