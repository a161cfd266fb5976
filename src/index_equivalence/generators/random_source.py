import numpy as np


class RandomValueSource:
    """Seedable source of integers and coin flips shared by all generators.

    Every generator draws from the instance it is given, so one seed reproduces
    an entire multi-trial run. There is no module-level generator.
    """

    def __init__(self, seed: int) -> None:
        self.reseed(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def reseed(self, seed: int) -> None:
        if seed < 0:
            raise ValueError(f"seed must be non-negative, got {seed}")
        self._seed = seed
        self._rng = np.random.default_rng(seed)

    def next_int(self, bound: int) -> int:
        """Return an integer in [0, bound)."""
        if bound <= 0:
            raise ValueError(f"bound must be positive, got {bound}")
        return int(self._rng.integers(bound))

    def next_bool(self, probability: float = 0.5) -> bool:
        """Return True with the given probability."""
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"probability must be within [0, 1], got {probability}")
        return bool(self._rng.random() < probability)
