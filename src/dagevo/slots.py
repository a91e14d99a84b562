"""Population slot helpers and relocation maps."""

from typing import List, Optional, Sequence


RelocationMap = List[Optional[int]]

DEFAULT_SEED = 0xDEADBEEF


class InvariantViolation(RuntimeError):
    """Raised when population bookkeeping breaks one of its contracts."""


def new_relocation_map(input_size: int, population_size: int) -> RelocationMap:
    """Return a map with every input slot pinned to itself and all others eliminated."""
    relocations: RelocationMap = [None] * population_size
    for i in range(min(input_size, population_size)):
        relocations[i] = i
    return relocations


def resolve_slot(relocations: Sequence[Optional[int]], slot: int) -> int:
    """Look up the new index of ``slot``; a pruned slot is a contract violation."""
    if slot < 0 or slot >= len(relocations):
        raise InvariantViolation(f"Slot {slot} is outside the relocation map.")
    new_slot = relocations[slot]
    if new_slot is None:
        raise InvariantViolation(
            f"Slot {slot} was eliminated but is still referenced; "
            "all dependent operators should have been relocated."
        )
    return new_slot


def surviving_slots(relocations: Sequence[Optional[int]]) -> List[int]:
    """Old indices that received a new slot."""
    return [i for i, new_slot in enumerate(relocations) if new_slot is not None]


__all__ = [
    "RelocationMap",
    "DEFAULT_SEED",
    "InvariantViolation",
    "new_relocation_map",
    "resolve_slot",
    "surviving_slots",
]
