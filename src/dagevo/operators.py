"""Program operators: the nodes of the population DAG."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np

from .distributions import DistributionStore
from .enums import ARITY, OperatorKind
from .slots import InvariantViolation, resolve_slot
from .weights import OperatorWeights


def _equality(x: int, y: int) -> int:
    return 1 if x == y else 0


def _both(x: int, y: int) -> int:
    return 1 if x != 0 and y != 0 else 0


def _either(x: int, y: int) -> int:
    return 1 if x != 0 or y != 0 else 0


def _negate(x: int) -> int:
    return 1 if x == 0 else 0


def _increment(x: int) -> int:
    return x + 1


def _if_then_else(x: int, y: int, z: int) -> int:
    # 0 is false
    return z if x == 0 else y


def _fifty_fifty(out: np.ndarray) -> None:
    out[0] = 0.5
    out[1] = 0.5


VALUE_FUNCTIONS: Dict[OperatorKind, Callable[..., int]] = {
    OperatorKind.EQUALITY: _equality,
    OperatorKind.AND: _both,
    OperatorKind.OR: _either,
    OperatorKind.NOT: _negate,
    OperatorKind.INCREMENT: _increment,
    OperatorKind.ITE: _if_then_else,
}


@dataclass(frozen=True)
class Operator:
    """
    One DAG node: an operator kind plus the slots it reads.

    ``args`` holds dependency slot indices in positional order. ``value`` is the
    constant of a VALUE node and the (ignored) seed of an AMBIGUITY node.
    """

    kind: OperatorKind
    args: Tuple[int, ...] = ()
    value: int = 0

    def __post_init__(self):
        kind = OperatorKind(self.kind)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "args", tuple(int(a) for a in self.args))
        if len(self.args) != ARITY[kind]:
            raise InvariantViolation(
                f"{kind.name} takes {ARITY[kind]} dependencies; received {len(self.args)}."
            )
        if kind == OperatorKind.VALUE and self.value < 0:
            raise InvariantViolation(f"Constants must be non-negative; received {self.value}.")

    @classmethod
    def initial(cls) -> "Operator":
        return cls(OperatorKind.INITIAL)

    @classmethod
    def constant(cls, value: int) -> "Operator":
        return cls(OperatorKind.VALUE, value=value)

    @classmethod
    def ambiguity(cls, seed: int = 0) -> "Operator":
        return cls(OperatorKind.AMBIGUITY, value=seed)

    @classmethod
    def equality(cls, x: int, y: int) -> "Operator":
        return cls(OperatorKind.EQUALITY, (x, y))

    @classmethod
    def increment(cls, x: int) -> "Operator":
        return cls(OperatorKind.INCREMENT, (x,))

    @classmethod
    def and_(cls, x: int, y: int) -> "Operator":
        return cls(OperatorKind.AND, (x, y))

    @classmethod
    def or_(cls, x: int, y: int) -> "Operator":
        return cls(OperatorKind.OR, (x, y))

    @classmethod
    def not_(cls, x: int) -> "Operator":
        return cls(OperatorKind.NOT, (x,))

    @classmethod
    def ite(cls, x: int, y: int, z: int) -> "Operator":
        return cls(OperatorKind.ITE, (x, y, z))

    @classmethod
    def new_random(
        cls,
        rng: random.Random,
        output_idx: int,
        weights: Optional[OperatorWeights] = None,
    ) -> "Operator":
        """Draw a random operator for slot ``output_idx``, reading only lower slots."""
        if weights is None:
            weights = OperatorWeights()
        kind, value = weights.draw(rng)
        arity = ARITY[kind]
        if arity and output_idx < 1:
            raise InvariantViolation(
                f"{kind.name} needs dependencies but slot {output_idx} has none below it."
            )
        args = tuple(rng.randrange(output_idx) for _ in range(arity))
        operator = cls(kind, args, value)
        operator.check_order(output_idx)
        return operator

    def dependents(self) -> Tuple[int, ...]:
        return self.args

    def check_order(self, slot: int) -> None:
        """Every dependency must live strictly below ``slot``."""
        for dep in self.args:
            if dep < 0 or dep >= slot:
                raise InvariantViolation(
                    f"{self} at slot {slot} references slot {dep}, which is not below it."
                )

    def relocate(self, relocations: Sequence[Optional[int]]) -> "Operator":
        """Rewrite every dependency through a relocation map."""
        if self.kind == OperatorKind.INITIAL:
            raise InvariantViolation("Cannot relocate an Initial operator.")
        if not self.args:
            return self
        return replace(self, args=tuple(resolve_slot(relocations, x) for x in self.args))

    def run(self, target: int, store: DistributionStore) -> None:
        """Compute this operator's distribution into slot ``target`` of ``store``."""
        kind = self.kind
        if kind == OperatorKind.INITIAL:
            raise InvariantViolation("Cannot run an Initial operator.")
        if kind == OperatorKind.VALUE:
            constant = self.value
            store.compute_at_0(target, lambda: constant)
        elif kind == OperatorKind.AMBIGUITY:
            store.compute_at_0_prob(target, _fifty_fifty)
        elif len(self.args) == 1:
            store.compute_at_1(target, self.args[0], VALUE_FUNCTIONS[kind])
        elif len(self.args) == 2:
            store.compute_at_2(target, self.args, VALUE_FUNCTIONS[kind])
        else:
            store.compute_at_3(target, self.args, VALUE_FUNCTIONS[kind])

    def __str__(self) -> str:
        name = self.kind.name.title()
        if self.kind in (OperatorKind.VALUE, OperatorKind.AMBIGUITY):
            return f"{name}({self.value})"
        if self.kind == OperatorKind.INITIAL:
            return name
        return f"{name}({', '.join(str(a) for a in self.args)})"


def describe_program(operators: Sequence[Operator], slot: int) -> str:
    """
    Render the expression rooted at ``slot`` as readable source.

    Walks the DAG with an explicit stack and renders every slot once, so deep
    chains do not hit the recursion limit. A shared sub-expression still
    appears once per use in the text.
    """
    rendered: Dict[int, str] = {}
    stack = [slot]
    while stack:
        current = stack[-1]
        if current in rendered:
            stack.pop()
            continue
        op = operators[current]
        pending = [dep for dep in op.dependents() if dep not in rendered]
        if pending:
            stack.extend(pending)
            continue
        stack.pop()
        rendered[current] = _render_node(op, current, [rendered[dep] for dep in op.args])
    return rendered[slot]


def _render_node(op: Operator, slot: int, parts: Sequence[str]) -> str:
    kind = op.kind
    if kind == OperatorKind.INITIAL:
        return f"input[{slot}]"
    if kind == OperatorKind.VALUE:
        return str(op.value)
    if kind == OperatorKind.AMBIGUITY:
        return f"ambiguous({op.value})"
    if kind == OperatorKind.INCREMENT:
        return f"1 + ({parts[0]})"
    if kind == OperatorKind.NOT:
        return f"!({parts[0]})"
    if kind == OperatorKind.EQUALITY:
        return f"({parts[0]}) == ({parts[1]})"
    if kind == OperatorKind.AND:
        return f"({parts[0]}) && ({parts[1]})"
    if kind == OperatorKind.OR:
        return f"({parts[0]}) || ({parts[1]})"
    return f"if ({parts[0]}) {{ {parts[1]} }} else {{ {parts[2]} }}"


__all__ = ["Operator", "VALUE_FUNCTIONS", "describe_program"]
