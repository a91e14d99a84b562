"""Tests for building transition examples from state samples."""

import unittest

from dagevo import transition_examples


class TestTransitionExamples(unittest.TestCase):

    def test_consecutive_pairs_become_examples(self):
        input_size, starts, ends = transition_examples([[[0, 1], [1, 1], [1, 0]]])
        self.assertEqual(input_size, 2)
        self.assertEqual(starts, [(0, 1), (1, 1)])
        self.assertEqual(ends, [(1, 1), (1, 0)])

    def test_samples_are_not_chained(self):
        _, starts, ends = transition_examples([[[0], [1]], [[2], [0]]])
        self.assertEqual(starts, [(0,), (2,)])
        self.assertEqual(ends, [(1,), (0,)])

    def test_single_state_samples_contribute_nothing(self):
        _, starts, _ = transition_examples([[[3, 3]], [[0, 1], [1, 0]]])
        self.assertEqual(starts, [(0, 1)])

    def test_rejects_samples_without_transitions(self):
        with self.assertRaises(ValueError):
            transition_examples([])
        with self.assertRaises(ValueError):
            transition_examples([[[1, 2]]])

    def test_rejects_mismatched_state_lengths(self):
        with self.assertRaises(ValueError):
            transition_examples([[[0, 1], [1]]])
        with self.assertRaises(ValueError):
            transition_examples([[[0, 1], [1, 1]], [[0, 1, 2], [0, 0, 0]]])

    def test_rejects_empty_and_negative_states(self):
        with self.assertRaises(ValueError):
            transition_examples([[[], []]])
        with self.assertRaises(ValueError):
            transition_examples([[[0, -1], [1, 1]]])


if __name__ == "__main__":
    unittest.main()
