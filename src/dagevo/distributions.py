"""Per-example store of discrete distributions, one per population slot."""

from __future__ import annotations

import itertools
from functools import lru_cache, reduce
from typing import Callable, Sequence, Optional, Tuple

import numpy as np

from .slots import InvariantViolation, surviving_slots


@lru_cache(maxsize=128)
def _outcome_table(f: Callable[..., int], size: int, arity: int) -> np.ndarray:
    """
    Output bucket of ``f`` for every combination of defined input values.

    Laid out in C order so it lines up with the raveled outer product of the
    input probabilities. Results ``>= size`` are folded into the undefined bucket.
    """
    combos = itertools.product(range(size), repeat=arity)
    table = np.fromiter(
        (min(int(f(*combo)), size) for combo in combos),
        dtype=np.intp,
        count=size ** arity,
    )
    if table.size and table.min() < 0:
        raise InvariantViolation("Value functions must not produce negative values.")
    table.flags.writeable = False
    return table


class DistributionStore:
    """
    Flat array of distributions over ``[0, size]`` for a single training example.

    Row ``i`` holds the distribution of population slot ``i``; column ``size``
    is the undefined bucket.
    """

    def __init__(self, size: int, count: int):
        if size < 1:
            raise ValueError(f"Domain size must be at least 1; received {size}.")
        if count < 0:
            raise ValueError(f"Slot count must be non-negative; received {count}.")
        self.size = int(size)
        self.count = int(count)
        self.values = np.zeros((self.count, self.size + 1), dtype=np.float64)

    def copy(self) -> "DistributionStore":
        clone = DistributionStore(self.size, self.count)
        clone.values[...] = self.values
        return clone

    def _check_slot(self, slot: int) -> int:
        if slot < 0 or slot >= self.count:
            raise InvariantViolation(
                f"Slot {slot} is outside a store of {self.count} slots."
            )
        return slot

    def set_values(self, offset: int, values: Sequence[int]) -> None:
        """Write one-hot distributions for consecutive slots starting at ``offset``."""
        for i, val in enumerate(values):
            if val < 0:
                raise InvariantViolation(f"Cannot encode negative value {val}.")
            row = self.read_mut(offset + i)
            row[:] = 0.0
            row[min(int(val), self.size)] = 1.0

    def store(self, slot: int, distribution: Sequence[float]) -> None:
        dist = np.asarray(distribution, dtype=np.float64)
        if dist.shape != (self.size + 1,):
            raise InvariantViolation(
                f"Distribution must have length {self.size + 1}; received shape {dist.shape}."
            )
        self.values[self._check_slot(slot)] = dist

    def read(self, slot: int) -> np.ndarray:
        return self.values[self._check_slot(slot)].copy()

    def read_mut(self, slot: int) -> np.ndarray:
        """Writable view of one slot's distribution."""
        return self.values[self._check_slot(slot)]

    def read_likely(self, slot: int) -> Tuple[int, float]:
        """Most likely value and its probability; ties go to the lowest value."""
        row = self.values[self._check_slot(slot)]
        best = int(np.argmax(row))
        return best, float(row[best])

    def relocate(self, relocations: Sequence[Optional[int]]) -> None:
        """Copy every surviving slot's distribution to its new index."""
        old = surviving_slots(relocations)
        if not old:
            return
        new = [relocations[i] for i in old]
        for slot in itertools.chain(old, new):
            self._check_slot(slot)
        # Fancy indexing gathers all sources before any row is written.
        self.values[new] = self.values[old]

    def _clear(self, target: int) -> np.ndarray:
        row = self.read_mut(target)
        row[:] = 0.0
        return row

    def _convolve(self, target: int, srcs: Tuple[int, ...], f: Callable[..., int]) -> None:
        inputs = [self.read(src) for src in srcs]
        row = self._clear(target)
        # If any input is undefined the output is undefined; the sum is not renormalized.
        for dist in inputs:
            row[self.size] += dist[self.size]
        probs = reduce(np.multiply.outer, [dist[: self.size] for dist in inputs])
        table = _outcome_table(f, self.size, len(srcs))
        row += np.bincount(table, weights=probs.ravel(), minlength=self.size + 1)

    def compute_at_0(self, target: int, f: Callable[[], int]) -> None:
        value = int(f())
        if value < 0:
            raise InvariantViolation("Value functions must not produce negative values.")
        row = self._clear(target)
        row[min(value, self.size)] = 1.0

    def compute_at_1(self, target: int, src: int, f: Callable[[int], int]) -> None:
        self._convolve(target, (src,), f)

    def compute_at_2(
        self, target: int, srcs: Tuple[int, int], f: Callable[[int, int], int]
    ) -> None:
        self._convolve(target, tuple(srcs), f)

    def compute_at_3(
        self, target: int, srcs: Tuple[int, int, int], f: Callable[[int, int, int], int]
    ) -> None:
        self._convolve(target, tuple(srcs), f)

    def _compute_prob(self, target: int, srcs: Tuple[int, ...], f: Callable[..., None]) -> None:
        inputs = [self.read(src) for src in srcs]
        out = self._clear(target)
        for combo in itertools.product(*(enumerate(dist.tolist()) for dist in inputs)):
            args = []
            for value, prob in combo:
                args.extend((value, prob))
            f(out, *args)

    def compute_at_0_prob(self, target: int, f: Callable[[np.ndarray], None]) -> None:
        """Let ``f`` fill the cleared target distribution directly."""
        self._compute_prob(target, (), f)

    def compute_at_1_prob(
        self, target: int, src: int, f: Callable[[np.ndarray, int, float], None]
    ) -> None:
        self._compute_prob(target, (src,), f)

    def compute_at_2_prob(
        self,
        target: int,
        srcs: Tuple[int, int],
        f: Callable[[np.ndarray, int, float, int, float], None],
    ) -> None:
        self._compute_prob(target, tuple(srcs), f)

    def compute_at_3_prob(
        self,
        target: int,
        srcs: Tuple[int, int, int],
        f: Callable[[np.ndarray, int, float, int, float, int, float], None],
    ) -> None:
        """
        Call ``f(out, x, px, y, py, z, pz)`` for every combination of input buckets.

        Unlike :meth:`compute_at_3`, the undefined bucket (index ``size``) is
        enumerated too, so ``f`` decides how undefined inputs contribute.
        """
        self._compute_prob(target, tuple(srcs), f)


__all__ = ["DistributionStore"]
