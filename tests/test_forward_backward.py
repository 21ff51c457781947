"""
Unit tests for the Forward-Backward algorithm.

Tests forward and backward recursions against hand-computed values,
output shape, boundary conditions and consistency of alpha-beta products.
"""

import numpy as np
import pytest

from hmm_states.hmm import ObservationSequence
from hmm_states.hmm.forward_backward import (
    backward_probabilities,
    forward_backward,
    forward_probabilities,
    sequence_probability
)


class TestForwardBackwardScenario:
    """Test recursions on the four-state reference scenario."""

    def test_forward_values(self, scenario_model, scenario_observations):
        alpha = forward_probabilities(scenario_model, scenario_observations)

        expected = np.array([
            [0.0, 0.54, 0.08, 0.0],
            [0.0, 0.369, 0.042, 0.0],
            [0.0, 0.02751, 0.10872, 0.0]
        ])
        np.testing.assert_allclose(alpha, expected)

    def test_backward_values(self, scenario_model, scenario_observations):
        beta = backward_probabilities(scenario_model, scenario_observations)

        expected = np.array([
            [0.209, 0.2265, 0.174, 0.0],
            [0.38, 0.31, 0.52, 0.0],
            [1.0, 1.0, 1.0, 1.0]
        ])
        np.testing.assert_allclose(beta, expected)

    def test_pairs_shape_and_content(self, scenario_model, scenario_observations):
        pairs = forward_backward(scenario_model, scenario_observations)

        assert pairs.shape == (3, 4, 2)
        np.testing.assert_allclose(pairs[:, :, 0], forward_probabilities(scenario_model, scenario_observations))
        np.testing.assert_allclose(pairs[:, :, 1], backward_probabilities(scenario_model, scenario_observations))

    def test_alpha_beta_product_is_constant_over_time(self, scenario_model, scenario_observations):
        pairs = forward_backward(scenario_model, scenario_observations)
        totals = (pairs[:, :, 0] * pairs[:, :, 1]).sum(axis=1)

        np.testing.assert_allclose(totals, [0.13623] * 3)
        assert sequence_probability(scenario_model, scenario_observations) == pytest.approx(0.13623)


class TestForwardBackwardBoundaries:
    """Test boundary conditions."""

    def test_single_observation(self, scenario_model):
        observations = ObservationSequence.from_symbols(scenario_model, [1], [2])

        pairs = forward_backward(scenario_model, observations)

        assert pairs.shape == (1, 4, 2)
        np.testing.assert_array_equal(pairs[0, :, 1], [1.0, 1.0, 1.0, 1.0])
        np.testing.assert_allclose(pairs[0, :, 0], [0.0, 0.06, 0.32, 0.0])

    def test_final_beta_is_one_without_end_transition(self, scenario_model, scenario_observations):
        # No transition into the end state is required at the last step
        beta = backward_probabilities(scenario_model, scenario_observations)

        np.testing.assert_array_equal(beta[-1], np.ones(scenario_model.n_states))

    def test_values_are_not_normalized(self, scenario_model, scenario_observations):
        alpha = forward_probabilities(scenario_model, scenario_observations)

        assert alpha[-1].sum() < 1.0
        assert alpha[0].sum() == pytest.approx(0.62)

    def test_deterministic(self, scenario_model, scenario_observations):
        first = forward_backward(scenario_model, scenario_observations)
        second = forward_backward(scenario_model, scenario_observations)

        np.testing.assert_array_equal(first, second)

    def test_long_sequence_underflows_without_error(self, scenario_model):
        length = 10000
        observations = ObservationSequence.from_symbols(
            scenario_model, [0, 1] * (length // 2), [1, 2] * (length // 2))

        pairs = forward_backward(scenario_model, observations)

        assert pairs.shape == (length, 4, 2)
        assert np.all(pairs[-1, :, 0] == 0.0)
