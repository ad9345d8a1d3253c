"""Per-thread random number streams for Monte Carlo estimation.

Every render worker owns exactly one Sampler; samplers are never shared
between threads, so no locking is needed and a worker's stream is fully
reproducible when it is seeded deterministically.

Example:
    >>> sampler = worker_sampler(base_seed=1234, worker_index=0)
    >>> u = sampler.next_float()
    >>> wavelength, pdf = sampler.sample_wavelength()
"""

import numpy as np

from luculenta.core.spectrum import LAMBDA_MAX, LAMBDA_MIN

# Uniform wavelength sampling density over the visible range
WAVELENGTH_PDF = 1.0 / (LAMBDA_MAX - LAMBDA_MIN)


class Sampler:
    """A uniform random stream backed by NumPy's PCG64 generator.

    Attributes:
        seed: The seed the stream was created with.
    """

    def __init__(self, seed: int = 0) -> None:
        self.seed = seed
        self._rng = np.random.Generator(np.random.PCG64(seed))

    def next_float(self) -> float:
        """Return a uniform variate in [0, 1)."""
        return float(self._rng.random())

    def next_2d(self) -> tuple[float, float]:
        """Return two independent uniform variates in [0, 1)."""
        u, v = self._rng.random(2)
        return float(u), float(v)

    def sample_wavelength(self) -> tuple[float, float]:
        """Sample a wavelength uniformly over the visible range.

        Returns:
            A tuple of (wavelength in nm, pdf per nm).
        """
        return LAMBDA_MIN + self.next_float() * (LAMBDA_MAX - LAMBDA_MIN), WAVELENGTH_PDF

    def __repr__(self) -> str:
        return f"Sampler(seed={self.seed})"


def worker_sampler(base_seed: int, worker_index: int) -> Sampler:
    """Create the sampler owned by one render worker.

    The seed is base_seed XOR worker_index, so runs with the same base seed
    and thread count reproduce each worker's stream exactly.
    """
    if worker_index < 0:
        raise ValueError(f"Worker index must be non-negative, got {worker_index}")
    return Sampler((base_seed ^ worker_index) & 0xFFFFFFFFFFFFFFFF)
