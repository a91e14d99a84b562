"""Evolution engine for populations of probabilistic DAG programs."""

from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .config import EvolverConfig
from .distributions import DistributionStore
from .operators import Operator, describe_program
from .report import Prediction, ProgramReport
from .samples import transition_examples
from .scoring import output_scores, score_values, stack_distributions, subtree_sizes
from .slots import DEFAULT_SEED, RelocationMap, new_relocation_map, surviving_slots
from .weights import OperatorWeights

logger = logging.getLogger(__name__)


class Evolver:
    """
    Evolves one shared population of operators against every training example.

    Slots ``0 .. input_size`` hold the fixed inputs. Slots below ``done_count``
    are survivors carried over from earlier generations; everything above is
    regenerated by :meth:`populate`.
    """

    def __init__(
        self,
        samples: Sequence[Sequence[Sequence[int]]],
        domain_size: int,
        population_size: int,
        seed: int = DEFAULT_SEED,
        weights: Optional[OperatorWeights] = None,
    ):
        self.config = EvolverConfig(
            domain_size=domain_size,
            population_size=population_size,
            seed=seed,
            weights=weights,
        )
        self._setup(samples)

    @classmethod
    def from_config(
        cls, samples: Sequence[Sequence[Sequence[int]]], config: EvolverConfig
    ) -> "Evolver":
        evolver = cls.__new__(cls)
        evolver.config = config
        evolver._setup(samples)
        return evolver

    def _setup(self, samples: Sequence[Sequence[Sequence[int]]]) -> None:
        config = self.config
        input_size, starts, ends = transition_examples(samples)
        if config.population_size <= input_size:
            raise ValueError(
                f"population_size ({config.population_size}) must exceed the "
                f"{input_size} input slots."
            )

        self.domain_size = config.domain_size
        self.population_size = config.population_size
        self.input_size = input_size
        self.stores: List[DistributionStore] = []
        for start in starts:
            store = DistributionStore(self.domain_size, self.population_size)
            store.set_values(0, start)
            self.stores.append(store)
        self.targets = np.array(ends, dtype=np.int64)

        self.operators: List[Operator] = [Operator.initial()] * self.population_size
        self.scores = np.zeros(self.population_size, dtype=np.float64)
        self.relocations: RelocationMap = new_relocation_map(input_size, self.population_size)
        self.weights = config.weights if config.weights is not None else OperatorWeights()
        self.rng = random.Random(config.seed)
        self.generation = 0
        self.done_count = input_size

    @property
    def output_size(self) -> int:
        return self.targets.shape[1]

    def populate(self):
        """Draw a fresh operator for every free slot."""
        for i in range(self.done_count, self.population_size):
            self.operators[i] = Operator.new_random(self.rng, i, self.weights)

    def evaluate(self):
        """Compute free slots in index order so dependencies are ready first."""
        for i in range(self.done_count, self.population_size):
            operator = self.operators[i]
            for store in self.stores:
                operator.run(i, store)

    def score(self):
        sizes = subtree_sizes(self.operators)
        for i in range(self.input_size, self.population_size):
            self.scores[i] = 0.0
            score_values(self.stores, i, self.operators, self.scores, self.targets, sizes)

    def prune(self) -> int:
        """
        Keep free slots scoring at least the population mean and compact them.

        Returns the number of surviving non-input slots.
        """
        avg_score = float(np.mean(self.scores))

        relocations = new_relocation_map(self.input_size, self.population_size)
        next_out = self.input_size
        for i in range(self.input_size, self.population_size):
            if self.scores[i] >= avg_score:
                relocations[i] = next_out
                next_out += 1

        operators = list(self.operators)
        scores = self.scores.copy()
        for i in surviving_slots(relocations)[self.input_size :]:
            new_slot = relocations[i]
            operator = self.operators[i].relocate(relocations)
            operator.check_order(new_slot)
            operators[new_slot] = operator
            scores[new_slot] = self.scores[i]
        self.operators = operators
        self.scores = scores

        for store in self.stores:
            store.relocate(relocations)

        survivors = next_out - self.input_size
        logger.debug(
            f"Gen {self.generation:03d}: survivors={survivors}/"
            f"{self.population_size - self.input_size}, mean score={avg_score:.4f}, "
            f"best score={float(self.scores.max()):.4f}"
        )
        self.relocations = relocations
        self.done_count = next_out
        self.generation += 1
        return survivors

    def step(self) -> int:
        """Run one populate, evaluate, score, prune generation."""
        self.populate()
        self.evaluate()
        self.score()
        return self.prune()

    def run_generations(
        self,
        generations: int,
        progress_callback: Optional[Callable[[int, "Evolver"], None]] = None,
    ):
        """
        Main evolution loop.

        Args:
            generations: Number of generations to run; there is no early exit
            progress_callback: Optional callback(generation, evolver) after each generation
        """
        logger.info(
            f"Evolving {self.population_size} slots over {len(self.stores)} examples "
            f"for {generations} generations"
        )
        for _ in range(generations):
            self.step()
            if progress_callback:
                progress_callback(self.generation, self)
        logger.info(
            f"Evolution stopped after generation {self.generation} "
            f"with {self.done_count - self.input_size} survivors"
        )

    def run(self, progress_callback: Optional[Callable[[int, "Evolver"], None]] = None):
        """Run the number of generations named in the configuration."""
        self.run_generations(self.config.generations, progress_callback)

    def best_slot(self, output: int) -> Tuple[int, float]:
        """Highest-scoring slot below ``done_count`` for one output variable."""
        sizes = subtree_sizes(self.operators, self.done_count)
        targets = self.targets[:, output : output + 1]
        best_slot = 0
        best_score = -float("inf")
        for i in range(self.done_count):
            dists = stack_distributions(self.stores, i)
            score = float(output_scores(dists, targets, sizes[i])[0])
            if score > best_score:
                best_score = score
                best_slot = i
        return best_slot, best_score

    def best_programs(self) -> List[ProgramReport]:
        """One report per output variable, built from the current survivors."""
        reports = []
        for output in range(self.output_size):
            slot, score = self.best_slot(output)
            predictions = []
            for store, target in zip(self.stores, self.targets):
                predicted, probability = store.read_likely(slot)
                predictions.append(Prediction(predicted, probability, int(target[output])))
            reports.append(
                ProgramReport(
                    output=output,
                    slot=slot,
                    score=score,
                    expression=describe_program(self.operators, slot),
                    predictions=predictions,
                )
            )
        return reports


__all__ = ["Evolver"]
