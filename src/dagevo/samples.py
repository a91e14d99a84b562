"""Turning observed state sequences into training examples."""

from __future__ import annotations

from typing import List, Sequence, Tuple

State = Tuple[int, ...]


def transition_examples(
    samples: Sequence[Sequence[Sequence[int]]],
) -> Tuple[int, List[State], List[State]]:
    """
    Split samples into ``(start, end)`` examples.

    Every consecutive pair of states in a sample is one example. Returns the
    shared state length, the start states and the end states (the targets).
    """
    starts: List[State] = []
    ends: List[State] = []
    input_size = None

    for sample_idx, sample in enumerate(samples):
        states = [tuple(int(v) for v in state) for state in sample]
        for state_idx, state in enumerate(states):
            if input_size is None:
                input_size = len(state)
                if input_size == 0:
                    raise ValueError("States must contain at least one value.")
            elif len(state) != input_size:
                raise ValueError(
                    f"State {state_idx} of sample {sample_idx} has {len(state)} values; "
                    f"expected {input_size}."
                )
            if any(v < 0 for v in state):
                raise ValueError(
                    f"State {state_idx} of sample {sample_idx} contains a negative value."
                )
        for start, end in zip(states, states[1:]):
            starts.append(start)
            ends.append(end)

    if not starts:
        raise ValueError("Samples must contain at least one pair of consecutive states.")
    return input_size, starts, ends


__all__ = ["State", "transition_examples"]
