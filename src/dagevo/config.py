"""Run parameters for the evolver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .slots import DEFAULT_SEED
from .weights import OperatorWeights


@dataclass
class EvolverConfig:
    """
    Everything that parameterizes a run besides the samples.

    ``domain_size`` is the largest representable value plus one; values at or
    above it are undefined.
    """

    domain_size: int
    population_size: int
    generations: int = 0
    seed: int = DEFAULT_SEED
    weights: Optional[OperatorWeights] = field(default=None, repr=False)

    def __post_init__(self):
        if self.domain_size < 1:
            raise ValueError(f"domain_size must be at least 1; received {self.domain_size}.")
        if self.population_size < 1:
            raise ValueError(
                f"population_size must be at least 1; received {self.population_size}."
            )
        if self.generations < 0:
            raise ValueError(f"generations must be non-negative; received {self.generations}.")


__all__ = ["EvolverConfig"]
