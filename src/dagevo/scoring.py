"""Fitness of population slots against the training targets."""

from __future__ import annotations

import math
from typing import List, MutableSequence, Optional, Sequence, Tuple

import numpy as np

from .distributions import DistributionStore
from .operators import Operator

CORRECT_WEIGHT = 10.0
ERROR_WEIGHT = 5.0
COMPLEXITY_WEIGHT = 1.0


def infinite_to_one(x: float) -> float:
    """Map ``[0, inf]`` monotonically onto ``[0, 1]``."""
    if math.isinf(x):
        return 1.0
    return x / (1.0 + x)


def subtree_sizes(operators: Sequence[Operator], limit: Optional[int] = None) -> List[float]:
    """
    Recursive node count of every slot below ``limit``.

    Shared sub-expressions are counted once per path, so sizes can grow
    exponentially with depth; they are kept as floats and may reach ``inf``.
    """
    if limit is None:
        limit = len(operators)
    sizes: List[float] = [0.0] * limit
    for i in range(limit):
        total = 1.0
        for dep in operators[i].dependents():
            total += sizes[dep]
        sizes[i] = total
    return sizes


def total_complexity(slot: int, operators: Sequence[Operator]) -> float:
    return subtree_sizes(operators, slot + 1)[slot]


def complexity_score(size: float) -> float:
    return 1.0 - infinite_to_one(size)


def stack_distributions(stores: Sequence[DistributionStore], slot: int) -> np.ndarray:
    """Distributions of one slot across all examples, shape ``(examples, size + 1)``."""
    if not stores:
        return np.zeros((0, 1), dtype=np.float64)
    return np.stack([store.read_mut(slot) for store in stores])


def portion_correct_scores(dists: np.ndarray, targets: np.ndarray) -> np.ndarray:
    """Per output, the fraction of examples whose most likely value hits the target."""
    examples = dists.shape[0]
    if examples == 0:
        return np.ones(targets.shape[1] if targets.ndim == 2 else 0)
    likely = np.argmax(dists, axis=1)
    wrong = np.count_nonzero(likely[:, None] != targets, axis=0)
    return 1.0 - wrong / max(1, examples)


def log_mse_scores(dists: np.ndarray, targets: np.ndarray) -> np.ndarray:
    """Per output, ``1 - x / (1 + x)`` of the probability-weighted squared error."""
    if dists.shape[0] == 0:
        return np.ones(targets.shape[1] if targets.ndim == 2 else 0)
    values = np.arange(dists.shape[1])
    sq_err = (targets[:, :, None] - values[None, None, :]).astype(np.float64) ** 2
    error = np.einsum("ev,eov->o", dists, sq_err)
    return 1.0 - error / (1.0 + error)


def output_scores(dists: np.ndarray, targets: np.ndarray, size: float) -> np.ndarray:
    """Combined score of one slot for every output variable."""
    targets = np.asarray(targets)
    return (
        CORRECT_WEIGHT * portion_correct_scores(dists, targets)
        + ERROR_WEIGHT * log_mse_scores(dists, targets)
        + COMPLEXITY_WEIGHT * complexity_score(size)
    )


def compute_score_for_output(
    stores: Sequence[DistributionStore],
    slot: int,
    output: int,
    targets: np.ndarray,
    operators: Sequence[Operator],
) -> float:
    targets = np.asarray(targets)
    dists = stack_distributions(stores, slot)
    size = total_complexity(slot, operators)
    return float(output_scores(dists, targets[:, output : output + 1], size)[0])


def combine_scores(old_score: float, new_score: float) -> float:
    return max(old_score, new_score)


def propagate_score(
    operators: Sequence[Operator], scores: MutableSequence[float], slot: int, score: float
) -> None:
    """Raise ``slot`` and every slot in its dependency subtree to at least ``score``."""
    stack = [slot]
    seen = set()
    while stack:
        i = stack.pop()
        if i in seen:
            continue
        seen.add(i)
        scores[i] = combine_scores(scores[i], score)
        stack.extend(operators[i].dependents())


def score_values(
    stores: Sequence[DistributionStore],
    slot: int,
    operators: Sequence[Operator],
    scores: MutableSequence[float],
    targets: np.ndarray,
    sizes: Optional[Sequence[float]] = None,
) -> Tuple[float, int]:
    """
    Score ``slot`` against its best output variable and propagate that score.

    Returns ``(best_score, best_output)``; the first output wins ties.
    """
    size = sizes[slot] if sizes is not None else total_complexity(slot, operators)
    per_output = output_scores(stack_distributions(stores, slot), targets, size)
    best_output = int(np.argmax(per_output))
    best_score = float(per_output[best_output])
    propagate_score(operators, scores, slot, best_score)
    return best_score, best_output


__all__ = [
    "CORRECT_WEIGHT",
    "ERROR_WEIGHT",
    "COMPLEXITY_WEIGHT",
    "infinite_to_one",
    "subtree_sizes",
    "total_complexity",
    "complexity_score",
    "stack_distributions",
    "portion_correct_scores",
    "log_mse_scores",
    "output_scores",
    "compute_score_for_output",
    "combine_scores",
    "propagate_score",
    "score_values",
]
