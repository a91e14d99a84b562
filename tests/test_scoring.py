"""Tests for slot scoring and score propagation."""

import math
import unittest

import numpy as np

from dagevo import DistributionStore, Operator
from dagevo.scoring import (
    combine_scores,
    complexity_score,
    compute_score_for_output,
    infinite_to_one,
    log_mse_scores,
    portion_correct_scores,
    propagate_score,
    score_values,
    stack_distributions,
    subtree_sizes,
    total_complexity,
)


class TestTransforms(unittest.TestCase):
    """Bounded transforms and complexity counting."""

    def test_infinite_to_one(self):
        self.assertEqual(infinite_to_one(0.0), 0.0)
        self.assertEqual(infinite_to_one(1.0), 0.5)
        self.assertEqual(infinite_to_one(math.inf), 1.0)

    def test_complexity_score(self):
        self.assertEqual(complexity_score(1.0), 0.5)
        self.assertAlmostEqual(complexity_score(3.0), 0.25)
        self.assertEqual(complexity_score(math.inf), 0.0)

    def test_subtree_sizes_count_every_path(self):
        operators = [
            Operator.initial(),
            Operator.initial(),
            Operator.increment(0),
            Operator.equality(2, 2),
            Operator.ite(3, 2, 1),
        ]
        self.assertEqual(subtree_sizes(operators), [1.0, 1.0, 2.0, 5.0, 9.0])
        self.assertEqual(subtree_sizes(operators, 3), [1.0, 1.0, 2.0])
        self.assertEqual(total_complexity(4, operators), 9.0)

    def test_combine_scores_keeps_max(self):
        self.assertEqual(combine_scores(2.0, 1.0), 2.0)
        self.assertEqual(combine_scores(1.0, 2.0), 2.0)


class TestPerOutputScores(unittest.TestCase):
    """Correctness and error terms over a stack of example distributions."""

    def setUp(self):
        store = DistributionStore(3, 2)
        store.set_values(0, [1, 2])
        self.stores = [store, store.copy()]

    def test_portion_correct(self):
        dists = stack_distributions(self.stores, 0)
        np.testing.assert_array_equal(
            portion_correct_scores(dists, np.array([[1, 2], [1, 2]])), [1.0, 0.0]
        )
        np.testing.assert_array_equal(
            portion_correct_scores(dists, np.array([[1, 2], [0, 2]])), [0.5, 0.0]
        )
        dists = stack_distributions(self.stores, 1)
        np.testing.assert_array_equal(
            portion_correct_scores(dists, np.array([[1, 2], [1, 2]])), [0.0, 1.0]
        )

    def test_portion_correct_without_examples(self):
        dists = np.zeros((0, 4))
        np.testing.assert_array_equal(portion_correct_scores(dists, np.zeros((0, 2))), [1.0, 1.0])

    def test_log_mse_exact_hit(self):
        dists = stack_distributions(self.stores, 0)
        self.assertEqual(log_mse_scores(dists, np.array([[1], [1]]))[0], 1.0)

    def test_log_mse_weights_errors_by_probability(self):
        dists = np.array([[0.5, 0.5, 0.0, 0.0]])
        # 0.5 * (2 - 0)^2 + 0.5 * (2 - 1)^2
        error = 2.5
        self.assertAlmostEqual(
            log_mse_scores(dists, np.array([[2]]))[0], 1.0 - error / (1.0 + error)
        )

    def test_log_mse_counts_undefined_as_size(self):
        dists = np.array([[0.0, 0.0, 0.0, 1.0]])
        self.assertAlmostEqual(log_mse_scores(dists, np.array([[1]]))[0], 1.0 - 4.0 / 5.0)

    def test_constant_program_scores_full_marks(self):
        operators = [Operator.initial(), Operator.initial()]
        targets = np.array([[1, 0], [1, 0]])
        score = compute_score_for_output(self.stores, 0, 0, targets, operators)
        self.assertAlmostEqual(score, 10.0 + 5.0 + 0.5)


class TestPropagation(unittest.TestCase):
    """Winning scores protect the whole dependency subtree."""

    def setUp(self):
        self.operators = [
            Operator.initial(),
            Operator.initial(),
            Operator.increment(0),
            Operator.equality(2, 1),
            Operator.not_(3),
        ]

    def test_propagates_to_transitive_dependencies(self):
        scores = np.zeros(5)
        propagate_score(self.operators, scores, 4, 3.0)
        np.testing.assert_array_equal(scores, [3.0] * 5)

    def test_never_lowers_a_score(self):
        scores = np.array([5.0, 0.0, 0.0, 0.0, 0.0])
        propagate_score(self.operators, scores, 2, 1.0)
        np.testing.assert_array_equal(scores, [5.0, 0.0, 1.0, 0.0, 0.0])

    def test_unrelated_slots_are_untouched(self):
        scores = np.zeros(5)
        propagate_score(self.operators, scores, 2, 2.0)
        self.assertEqual(scores[1], 0.0)
        self.assertEqual(scores[3], 0.0)

    def test_score_values_picks_best_output(self):
        operators = [Operator.initial(), Operator.initial(), Operator.not_(1)]
        stores = []
        for inputs in ([1, 0], [2, 0]):
            store = DistributionStore(3, 3)
            store.set_values(0, inputs)
            operators[2].run(2, store)
            stores.append(store)
        targets = np.array([[0, 1], [0, 1]])
        scores = np.zeros(3)

        best_score, best_output = score_values(stores, 2, operators, scores, targets)

        self.assertEqual(best_output, 1)
        self.assertAlmostEqual(best_score, 10.0 + 5.0 + 1.0 / 3.0)
        self.assertEqual(scores[2], best_score)
        self.assertEqual(scores[1], best_score)
        self.assertEqual(scores[0], 0.0)


if __name__ == "__main__":
    unittest.main()
