"""
Forward-Backward probability computation.

alpha[t, s] is the probability of observations 0..t together with hidden state
s at time t; beta[t, s] is the probability of observations t+1..T-1 given
state s at time t. Neither pass is scaled or normalized by the total sequence
probability, and the backward pass does not force a final transition into the
end state.
"""

import numpy as np

from ..logger import get_logger
from .observations import ObservationSequence
from .model import HMMModel

logger = get_logger(__name__)


def forward_probabilities(model: HMMModel, observations: ObservationSequence) -> np.ndarray:
    """
    Compute unscaled forward probabilities.

    Returns:
        alpha: Forward probabilities [T, n_states]
    """
    A, B = model.A, model.B
    symbols = observations.symbols
    T = len(symbols)

    alpha = np.zeros((T, model.n_states))

    # t = 0: Initialize from the begin state
    alpha[0, :] = A[model.begin_state, :] * B[:, symbols[0]]

    # t = 1, ..., T-1: Recursion
    for t in range(1, T):
        for j in range(model.n_states):
            alpha[t, j] = np.sum(alpha[t-1, :] * A[:, j]) * B[j, symbols[t]]

    return alpha


def backward_probabilities(model: HMMModel, observations: ObservationSequence) -> np.ndarray:
    """
    Compute unscaled backward probabilities.

    Returns:
        beta: Backward probabilities [T, n_states]
    """
    A, B = model.A, model.B
    symbols = observations.symbols
    T = len(symbols)

    beta = np.zeros((T, model.n_states))

    # t = T-1: empty suffix
    beta[T-1, :] = 1.0

    # t = T-2, ..., 0: Recursion
    for t in range(T-2, -1, -1):
        for i in range(model.n_states):
            beta[t, i] = np.sum(A[i, :] * B[:, symbols[t+1]] * beta[t+1, :])

    return beta


def forward_backward(model: HMMModel, observations: ObservationSequence) -> np.ndarray:
    """
    Compute alpha-beta pairs for every time step and state.

    Args:
        model: HMM description
        observations: Observed symbol sequence of length T

    Returns:
        Array [T, n_states, 2] where [t, s, 0] is alpha(t, s) and
        [t, s, 1] is beta(t, s)
    """
    alpha = forward_probabilities(model, observations)
    beta = backward_probabilities(model, observations)

    pairs = np.stack([alpha, beta], axis=-1)

    logger.debug(f"Forward-backward completed: T={len(observations)}, "
                 f"prefix probability={alpha[-1, :].sum():.6e}")

    return pairs


def sequence_probability(model: HMMModel, observations: ObservationSequence) -> float:
    """Probability of the whole observed sequence, summed over final states."""
    alpha = forward_probabilities(model, observations)
    return float(alpha[-1, :].sum())
