"""
Viterbi decoding of the most probable hidden state path.

Probabilities are plain products of model parameters: no scaling and no log
transform is applied, so very long sequences underflow to zero. The path is
not forced to finish in the end state.
"""

from typing import List, Sequence, Tuple

import numpy as np

from ..logger import get_logger
from .observations import ObservationSequence
from .model import HMMModel

logger = get_logger(__name__)


def viterbi_tables(model: HMMModel, observations: ObservationSequence) -> Tuple[np.ndarray, np.ndarray]:
    """
    Fill the Viterbi dynamic programming tables.

    Args:
        model: HMM description
        observations: Observed symbol sequence of length T

    Returns:
        Tuple of:
        - sequence_probability: [T, n_states], best path probability ending in
          state s after explaining observations 0..t
        - backpointer: [T, n_states], predecessor state achieving that probability
    """
    A, B = model.A, model.B
    symbols = observations.symbols
    T = len(symbols)
    n_states = model.n_states

    sequence_probability = np.zeros((T, n_states))
    backpointer = np.zeros((T, n_states), dtype=int)

    # t = 0: the begin state is the only predecessor
    sequence_probability[0, :] = A[model.begin_state, :] * B[:, symbols[0]]
    backpointer[0, :] = model.begin_state

    for t in range(1, T):
        emission = B[:, symbols[t]]
        for s in range(n_states):
            candidates = sequence_probability[t-1, :] * A[:, s] * emission[s]
            # argmax keeps the lowest index on ties
            best_prev = int(np.argmax(candidates))

            backpointer[t, s] = best_prev
            sequence_probability[t, s] = candidates[best_prev]

    return sequence_probability, backpointer


def viterbi_decode(model: HMMModel, observations: ObservationSequence) -> List[int]:
    """
    Find the single most probable hidden state sequence.

    Args:
        model: HMM description
        observations: Observed symbol sequence of length T

    Returns:
        List of T state indices in chronological order
    """
    sequence_probability, backpointer = viterbi_tables(model, observations)
    T = sequence_probability.shape[0]

    state = int(np.argmax(sequence_probability[T-1, :]))
    path = [state]

    for t in range(T - 1, 0, -1):
        state = int(backpointer[t, state])
        path.append(state)

    path.reverse()

    logger.debug(f"Viterbi decoding completed: T={T}, "
                 f"best path probability={sequence_probability[T-1, path[-1]]:.6e}")

    return path


def path_probability(model: HMMModel, observations: ObservationSequence,
                     path: Sequence[int]) -> float:
    """
    Joint probability of a hidden state path and the observed symbols.

    The path starts from the begin state; no final transition into the end
    state is included, matching the quantity maximized by viterbi_decode.
    """
    if len(path) != len(observations):
        raise ValueError(f"Length mismatch: path={len(path)}, observations={len(observations)}")

    probability = 1.0
    prev_state = model.begin_state

    for state, symbol in zip(path, observations.symbols):
        probability *= model.A[prev_state, state] * model.B[state, symbol]
        prev_state = state

    return float(probability)
