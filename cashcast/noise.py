"""
Innovation terms for the runners.

The trend-seasonal runner perturbs each step with a small random factor. The
generator is injected so that forecasts can be made reproducible (seeded) or
fully deterministic (zero noise).
"""

import threading
from typing import Protocol

import numpy as np


class NoiseGenerator(Protocol):
    """Source of the per-step innovation factor."""

    def sample(self) -> float: ...


class UniformNoise:
    """Uniform noise in ``[-amplitude / 2, amplitude / 2)``."""

    def __init__(self, amplitude: float = 0.1, seed: int | None = None) -> None:
        self.amplitude = amplitude
        self._rng = np.random.default_rng(seed)
        # numpy generators are not safe to share across ensemble worker threads
        self._lock = threading.Lock()

    def sample(self) -> float:
        with self._lock:
            draw = self._rng.random()
        return float((draw - 0.5) * self.amplitude)


class ZeroNoise:
    """Noise generator that always returns 0."""

    def sample(self) -> float:
        return 0.0
