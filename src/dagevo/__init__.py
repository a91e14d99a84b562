"""Probabilistic DAG program evolution."""

from .enums import (
    OperatorKind,
    ARITY,
    LEAF_KINDS,
    BOOLEAN_LOGIC_KINDS,
    ARITHMETIC_KINDS,
    CONTROL_FLOW_KINDS,
)
from .slots import (
    DEFAULT_SEED,
    InvariantViolation,
    RelocationMap,
    new_relocation_map,
    resolve_slot,
    surviving_slots,
)
from .weights import DEFAULT_WEIGHT_TABLE, OperatorWeights
from .distributions import DistributionStore
from .operators import Operator, VALUE_FUNCTIONS, describe_program
from .scoring import (
    compute_score_for_output,
    propagate_score,
    score_values,
    subtree_sizes,
    total_complexity,
)
from .samples import transition_examples
from .config import EvolverConfig
from .report import Prediction, ProgramReport
from .evolver import Evolver

__all__ = [
    "OperatorKind",
    "ARITY",
    "LEAF_KINDS",
    "BOOLEAN_LOGIC_KINDS",
    "ARITHMETIC_KINDS",
    "CONTROL_FLOW_KINDS",
    "DEFAULT_SEED",
    "InvariantViolation",
    "RelocationMap",
    "new_relocation_map",
    "resolve_slot",
    "surviving_slots",
    "DEFAULT_WEIGHT_TABLE",
    "OperatorWeights",
    "DistributionStore",
    "Operator",
    "VALUE_FUNCTIONS",
    "describe_program",
    "compute_score_for_output",
    "propagate_score",
    "score_values",
    "subtree_sizes",
    "total_complexity",
    "transition_examples",
    "EvolverConfig",
    "Prediction",
    "ProgramReport",
    "Evolver",
]
