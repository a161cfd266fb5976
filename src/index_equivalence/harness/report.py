import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from index_equivalence.types import spec_to_query

if TYPE_CHECKING:
    from index_equivalence.harness.driver import TrialState


@dataclass
class TrialSummary:
    """Counters and check statistics for one finished trial."""

    trial_index: int
    fields: list[str]
    index_spec: dict[str, int]
    inserted: int
    removed: int
    delete_calls: int
    final_count: int
    checks: int
    mean_result_size: float
    max_result_size: int


@dataclass
class RunOutcome:
    seed: int
    trials: list[TrialSummary]

    @property
    def total_checks(self) -> int:
        return sum(trial.checks for trial in self.trials)


def summarize_trial(state: "TrialState", final_count: int) -> TrialSummary:
    sizes = np.asarray(state.result_sizes, dtype=np.int64)
    return TrialSummary(
        trial_index=state.trial_index,
        fields=list(state.fields),
        index_spec=spec_to_query(state.index_spec),
        inserted=state.inserted,
        removed=state.removed,
        delete_calls=state.delete_calls,
        final_count=final_count,
        checks=state.checks,
        mean_result_size=float(np.mean(sizes)) if sizes.size else 0.0,
        max_result_size=int(np.max(sizes)) if sizes.size else 0,
    )


def log_summary_table(logger: logging.Logger, outcome: RunOutcome) -> None:
    """Log one row per trial plus a total line."""
    logger.info("")
    logger.info(
        "%-6s  %-12s  %-24s  %-9s  %-9s  %-9s  %-7s  %s",
        "Trial",
        "Fields",
        "Index",
        "Inserted",
        "Removed",
        "Final",
        "Checks",
        "Mean hits",
    )
    logger.info("-" * 100)
    for trial in outcome.trials:
        logger.info(
            "%-6d  %-12s  %-24s  %-9d  %-9d  %-9d  %-7d  %.1f",
            trial.trial_index + 1,
            ",".join(trial.fields),
            " ".join(f"{name}:{value}" for name, value in trial.index_spec.items()),
            trial.inserted,
            trial.removed,
            trial.final_count,
            trial.checks,
            trial.mean_result_size,
        )
    logger.info("-" * 100)
    logger.info(
        "seed=%d | trials=%d | checks=%d | all equivalent",
        outcome.seed,
        len(outcome.trials),
        outcome.total_checks,
    )
