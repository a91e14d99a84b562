"""Read-only summaries of the best evolved programs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Prediction:
    """Most likely value of a program on one example, next to the expected value."""

    predicted: int
    probability: float
    target: int

    @property
    def correct(self) -> bool:
        return self.predicted == self.target


@dataclass(frozen=True)
class ProgramReport:
    """Best surviving slot for one output variable."""

    output: int
    slot: int
    score: float
    expression: str
    predictions: List[Prediction] = field(default_factory=list)

    @property
    def accuracy(self) -> float:
        if not self.predictions:
            return 1.0
        return sum(p.correct for p in self.predictions) / len(self.predictions)

    def to_human_readable(self) -> List[str]:
        lines = [
            f"best program (scores {self.score:.4f}) for {self.output}:",
            f"  {self.expression}",
        ]
        for p in self.predictions:
            mark = "✓" if p.correct else "✗"
            lines.append(
                f"  {mark} predicted {p.predicted} with prob {p.probability:.4f} vs target {p.target}"
            )
        return lines


__all__ = ["Prediction", "ProgramReport"]
