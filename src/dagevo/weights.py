"""Weighted categorical table used to generate random operators."""

from __future__ import annotations

import random
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from .enums import OperatorKind
from .slots import InvariantViolation


# (kind, constant, weight); the constant is only meaningful for VALUE.
DEFAULT_WEIGHT_TABLE: Tuple[Tuple[OperatorKind, int, int], ...] = (
    (OperatorKind.AMBIGUITY, 0, 1),
    (OperatorKind.VALUE, 0, 1),
    (OperatorKind.VALUE, 1, 1),
    (OperatorKind.VALUE, 2, 1),
    (OperatorKind.EQUALITY, 0, 5),
    (OperatorKind.INCREMENT, 0, 10),
    (OperatorKind.AND, 0, 10),
    (OperatorKind.OR, 0, 10),
    (OperatorKind.NOT, 0, 10),
    (OperatorKind.ITE, 0, 15),
)

EntryKey = Tuple[int, int]


class OperatorWeights:
    """
    Weights for operator kinds, optionally reshaped by named groups.

    The resolved table is the only place the generation weights live; its total
    is always derived from the entries, never declared separately.
    """

    def __init__(
        self,
        table: Optional[Iterable[Tuple[Union[int, OperatorKind], int, int]]] = None,
    ):
        if table is None:
            table = DEFAULT_WEIGHT_TABLE
        self._order: List[EntryKey] = []
        self._base: Dict[EntryKey, int] = {}
        for kind, value, weight in table:
            key = self._normalize_entry(kind, value)
            if key not in self._base:
                self._order.append(key)
            self._base[key] = self._check_weight(weight)
        self._overrides: Dict[EntryKey, int] = {}
        self._groups: Dict[str, Set[int]] = {}
        self._group_weights: Dict[str, int] = {}
        self._resolved: Optional[List[Tuple[OperatorKind, int, int]]] = None

    @staticmethod
    def _normalize_entry(kind: Union[int, OperatorKind], value: int = 0) -> EntryKey:
        return int(OperatorKind(kind)), int(value)

    @staticmethod
    def _normalize_group(name: str) -> str:
        clean = name.strip()
        if not clean:
            raise ValueError("Group name must be a non-empty string.")
        return clean

    @staticmethod
    def _check_weight(weight: int) -> int:
        if int(weight) != weight or weight < 0:
            raise ValueError(f"Weights must be non-negative integers; received {weight!r}.")
        return int(weight)

    def set_weight(
        self, kind: Union[int, OperatorKind], weight: Optional[int], value: int = 0
    ) -> None:
        """Assign or clear an entry-specific weight."""
        key = self._normalize_entry(kind, value)
        if key not in self._base:
            raise ValueError(f"No table entry for {OperatorKind(kind).name}({value}).")
        if weight is None:
            self._overrides.pop(key, None)
        else:
            self._overrides[key] = self._check_weight(weight)
        self._resolved = None

    def get_weight(self, kind: Union[int, OperatorKind], value: int = 0) -> int:
        """Resolved weight of one table entry."""
        key = self._normalize_entry(kind, value)
        if key not in self._base:
            raise ValueError(f"No table entry for {OperatorKind(kind).name}({value}).")
        return self._resolve(key)

    def set_group(
        self,
        name: str,
        kinds: Iterable[Union[int, OperatorKind]],
        *,
        weight: Optional[int] = None,
    ) -> None:
        """Define or replace a group of kinds, optionally setting its weight."""
        key = self._normalize_group(name)
        self._groups[key] = {int(OperatorKind(k)) for k in kinds}
        if weight is not None:
            self._group_weights[key] = self._check_weight(weight)
        self._resolved = None

    def group_members(self, name: str) -> Set[int]:
        key = self._normalize_group(name)
        return set(self._groups.get(key, set()))

    def set_group_weight(self, name: str, weight: Optional[int]) -> None:
        """Assign or clear a group weight; applies to every entry of every member kind."""
        key = self._normalize_group(name)
        if weight is None:
            self._group_weights.pop(key, None)
        else:
            self._group_weights[key] = self._check_weight(weight)
        self._resolved = None

    def _resolve(self, key: EntryKey) -> int:
        if key in self._overrides:
            return self._overrides[key]
        group_weights = [
            weight
            for name, members in self._groups.items()
            if key[0] in members and (weight := self._group_weights.get(name)) is not None
        ]
        if group_weights:
            return max(group_weights)
        return self._base[key]

    def entries(self) -> List[Tuple[OperatorKind, int, int]]:
        """Resolved ``(kind, value, weight)`` entries in table order."""
        if self._resolved is None:
            self._resolved = [
                (OperatorKind(kind), value, self._resolve((kind, value)))
                for kind, value in self._order
            ]
        return self._resolved

    def total(self) -> int:
        return sum(weight for _, _, weight in self.entries())

    def draw(self, rng: random.Random) -> Tuple[OperatorKind, int]:
        """Draw one ``(kind, value)`` entry proportionally to its weight."""
        entries = self.entries()
        total = sum(weight for _, _, weight in entries)
        if total <= 0:
            raise ValueError("Operator weights must have a positive total.")
        op_idx = rng.randrange(total)
        upper = 0
        for kind, value, weight in entries:
            upper += weight
            if op_idx < upper:
                return kind, value
        raise InvariantViolation(
            f"Drew {op_idx} past the end of a weight table totalling {total}."
        )


__all__ = ["DEFAULT_WEIGHT_TABLE", "OperatorWeights"]
