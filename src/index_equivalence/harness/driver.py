"""Trial scheduling for the differential index checker.

Each trial walks INIT -> SEEDING -> MUTATING -> DONE against a freshly reset
collection:

1. INIT: reset the collection, draw the active fields and index key pattern,
   create the index.
2. SEEDING: insert-only growth; each insert may trigger a check.
3. MUTATING: mixed inserts and delete-by-example churn; each iteration may
   trigger a check.
4. DONE: one unconditional check, so every trial is checked at least once.

Usage:
    from index_equivalence.generators.random_source import RandomValueSource
    from index_equivalence.harness.config import WorkloadConfig
    from index_equivalence.harness.driver import WorkloadDriver
    from index_equivalence.store.sqlite import SQLiteCollection

    with SQLiteCollection() as collection:
        outcome = WorkloadDriver(collection, RandomValueSource(42), WorkloadConfig()).run()
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from index_equivalence.generators.directions import IndexSpecGenerator, SortSpecGenerator
from index_equivalence.generators.documents import DocumentGenerator
from index_equivalence.generators.predicates import PredicateGenerator
from index_equivalence.generators.random_source import RandomValueSource
from index_equivalence.generators.schema import SchemaGenerator
from index_equivalence.harness.config import WorkloadConfig
from index_equivalence.harness.oracle import EquivalenceOracle
from index_equivalence.harness.report import RunOutcome, TrialSummary, summarize_trial
from index_equivalence.store.base import Collection
from index_equivalence.types import IndexSpec, spec_to_query

logger = logging.getLogger(__name__)


class TrialPhase(Enum):
    INIT = "init"
    SEEDING = "seeding"
    MUTATING = "mutating"
    DONE = "done"


@dataclass
class TrialState:
    trial_index: int
    fields: list[str]
    index_spec: IndexSpec
    phase: TrialPhase = TrialPhase.INIT
    inserted: int = 0
    removed: int = 0
    delete_calls: int = 0
    checks: int = 0
    result_sizes: list[int] = field(default_factory=list)


class WorkloadDriver:
    """Runs repeated trials of random mutations interleaved with equivalence checks.

    Args:
        collection: Collection under test; reset at the start of every trial.
        source: Random source shared by every generator, so the seed fixes the run.
        config: Workload sizes and probabilities.
        oracle: Equivalence oracle. Built from `source` when omitted.
    """

    def __init__(
        self,
        collection: Collection,
        source: RandomValueSource,
        config: WorkloadConfig | None = None,
        oracle: EquivalenceOracle | None = None,
    ) -> None:
        self.collection = collection
        self.source = source
        self.config = config or WorkloadConfig()
        self.schemas = SchemaGenerator(source, self.config.field_universe)
        self.index_specs = IndexSpecGenerator(source)
        self.documents = DocumentGenerator(source, self.config.value_range)
        self.oracle = oracle or EquivalenceOracle(
            collection,
            PredicateGenerator(source, self.documents, self.config.membership_max),
            SortSpecGenerator(source),
        )

    def run(self) -> RunOutcome:
        trials: list[TrialSummary] = []
        for trial_index in range(self.config.trials):
            state = self.run_trial(trial_index)
            trials.append(summarize_trial(state, self.collection.count()))
        return RunOutcome(seed=self.source.seed, trials=trials)

    def run_trial(self, trial_index: int) -> TrialState:
        # INIT
        self.collection.reset()
        fields = self.schemas.generate()
        index_spec = self.index_specs.generate(fields)
        self.collection.create_index(index_spec)
        state = TrialState(trial_index=trial_index, fields=fields, index_spec=index_spec)
        logger.info(
            "Trial %d/%d | seed=%d | fields=%s | index=%s",
            trial_index + 1,
            self.config.trials,
            self.source.seed,
            ",".join(fields),
            spec_to_query(index_spec),
        )

        state.phase = TrialPhase.SEEDING
        for iteration in range(self.config.seed_inserts):
            self.collection.insert(self.documents.generate(fields))
            state.inserted += 1
            self._maybe_check(state, iteration)

        state.phase = TrialPhase.MUTATING
        for iteration in range(self.config.mutation_iterations):
            if self.source.next_bool(self.config.insert_probability):
                self.collection.insert(self.documents.generate(fields))
                state.inserted += 1
            else:
                state.removed += self.collection.delete_by_example(self.documents.generate(fields))
                state.delete_calls += 1
            self._maybe_check(state, iteration)

        state.phase = TrialPhase.DONE
        self._check(state, None)
        return state

    def _maybe_check(self, state: TrialState, iteration: int) -> None:
        if self.source.next_bool(self.config.check_probability):
            self._check(state, iteration)

    def _check(self, state: TrialState, iteration: int | None) -> None:
        marker = "final" if iteration is None else f"iteration {iteration}"
        logger.info("[trial %d] %s %s", state.trial_index + 1, state.phase.value, marker)
        result = self.oracle.check(state.fields, state.index_spec)
        state.checks += 1
        state.result_sizes.append(result.result_size)
