"""Operator kinds and kind groupings for dagevo programs."""

from enum import IntEnum
from typing import Dict, List


class OperatorKind(IntEnum):
    """Operator kinds as integer indices."""

    # Inputs (written directly into the stores, never computed)
    INITIAL = 0

    # Leaves (no dependencies)
    VALUE = 1
    AMBIGUITY = 2

    # Comparison and boolean logic (result is 0 or 1)
    EQUALITY = 10
    AND = 11
    OR = 12
    NOT = 13

    # Arithmetic
    INCREMENT = 20

    # Control flow
    ITE = 30


ARITY: Dict[OperatorKind, int] = {
    OperatorKind.INITIAL: 0,
    OperatorKind.VALUE: 0,
    OperatorKind.AMBIGUITY: 0,
    OperatorKind.EQUALITY: 2,
    OperatorKind.AND: 2,
    OperatorKind.OR: 2,
    OperatorKind.NOT: 1,
    OperatorKind.INCREMENT: 1,
    OperatorKind.ITE: 3,
}

LEAF_KINDS: List[OperatorKind] = [
    OperatorKind.VALUE,
    OperatorKind.AMBIGUITY,
]

BOOLEAN_LOGIC_KINDS: List[OperatorKind] = [
    OperatorKind.EQUALITY,
    OperatorKind.AND,
    OperatorKind.OR,
    OperatorKind.NOT,
]

ARITHMETIC_KINDS: List[OperatorKind] = [
    OperatorKind.INCREMENT,
]

CONTROL_FLOW_KINDS: List[OperatorKind] = [
    OperatorKind.ITE,
]


__all__ = [
    "OperatorKind",
    "ARITY",
    "LEAF_KINDS",
    "BOOLEAN_LOGIC_KINDS",
    "ARITHMETIC_KINDS",
    "CONTROL_FLOW_KINDS",
]
