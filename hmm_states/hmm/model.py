"""
Discrete Hidden Markov Model description.

This module holds the model consumed by the decoding algorithms: a dense
transition matrix between named states and a per-state emission matrix over a
lowercase-letter alphabet. State 0 is the silent begin state and state N-1 is
the silent end state.
"""

import numpy as np
from typing import Dict, List, Optional, Sequence, Union

from ..exceptions import ModelValidationError
from ..logger import get_logger

logger = get_logger(__name__)

ArrayLike = Union[np.ndarray, Sequence[Sequence[float]]]


def symbol_to_index(symbol: str) -> int:
    """Map an emission symbol ('a'..'z') to its alphabet index."""
    return ord(symbol[0]) - ord('a')


def index_to_symbol(index: int) -> str:
    """Map an alphabet index back to its emission symbol."""
    return chr(ord('a') + index)


class HMMModel:
    """
    First-order discrete HMM with designated begin and end states.

    The model is read-only once constructed: the transition and emission
    matrices are stored as non-writeable copies so the same instance can be
    shared between decoders and estimators.

    Structure:
    - N states indexed 0..N-1, state 0 is begin, state N-1 is end (N >= 2)
    - A[i, j] = P(q_t+1 = j | q_t = i), no transitions out of end or into begin
    - B[s, k] = P(o_t = k | q_t = s), begin and end states never emit
    """

    def __init__(self, state_names: List[str], alphabet_size: int,
                 transition_prob: ArrayLike, emission_prob: ArrayLike):
        """
        Initialize HMMModel from named states and dense probability matrices.

        Args:
            state_names: State names in index order (begin first, end last)
            alphabet_size: Number of emission symbols
            transition_prob: Transition matrix [n_states, n_states]
            emission_prob: Emission matrix [n_states, alphabet_size]

        Raises:
            ModelValidationError: If the model violates structural invariants
        """
        self.state_names = list(state_names)
        self.state_index: Dict[str, int] = {
            name: i for i, name in enumerate(self.state_names)
        }
        self.alphabet_size = int(alphabet_size)

        self.A = np.array(transition_prob, dtype=float)
        self.B = np.array(emission_prob, dtype=float)

        self.validate()

        self.A.flags.writeable = False
        self.B.flags.writeable = False

        logger.debug(f"Initialized HMMModel with {self.n_states} states "
                     f"and alphabet of {self.alphabet_size} symbols")

    @classmethod
    def from_arrays(cls, transition_prob: ArrayLike, emission_prob: ArrayLike,
                    state_names: Optional[List[str]] = None) -> 'HMMModel':
        """
        Build a model directly from probability matrices.

        State names default to 'begin', 's1', ..., 'end'.
        """
        transition = np.asarray(transition_prob, dtype=float)
        emission = np.asarray(emission_prob, dtype=float)

        if emission.ndim != 2:
            raise ModelValidationError(
                f"Emission matrix must be 2-dimensional, got shape {emission.shape}")

        if state_names is None:
            n_states = transition.shape[0] if transition.ndim > 0 else 0
            inner = [f"s{i}" for i in range(1, n_states - 1)]
            state_names = ['begin'] + inner + ['end']

        return cls(state_names, emission.shape[1], transition, emission)

    @property
    def n_states(self) -> int:
        return len(self.state_names)

    @property
    def begin_state(self) -> int:
        return 0

    @property
    def end_state(self) -> int:
        return self.n_states - 1

    @property
    def transition_prob(self) -> np.ndarray:
        return self.A

    @property
    def emission_prob(self) -> np.ndarray:
        return self.B

    def validate(self) -> bool:
        """
        Validate dimensions and begin/end state structure.

        Rows are not required to be stochastic: unspecified entries default
        to zero in the model file format.

        Returns:
            bool: True if the model is structurally valid

        Raises:
            ModelValidationError: If any invariant is violated
        """
        n = self.n_states

        if n < 2:
            raise ModelValidationError(
                f"Model needs at least begin and end states, got {n} state(s)")

        if len(self.state_index) != n:
            raise ModelValidationError("State names must be unique")

        if self.alphabet_size < 1:
            raise ModelValidationError(
                f"Alphabet size must be positive, got {self.alphabet_size}")

        if self.A.shape != (n, n):
            raise ModelValidationError(
                f"Transition matrix shape {self.A.shape} doesn't match expected ({n}, {n})")

        if self.B.shape != (n, self.alphabet_size):
            raise ModelValidationError(
                f"Emission matrix shape {self.B.shape} doesn't match expected "
                f"({n}, {self.alphabet_size})")

        if np.any(self.A < 0) or np.any(self.B < 0):
            raise ModelValidationError("Probabilities must be non-negative")

        if np.any(self.A[self.end_state, :] != 0):
            raise ModelValidationError("Transition from the ending state is forbidden")

        if np.any(self.A[:, self.begin_state] != 0):
            raise ModelValidationError("Transition to the starting state is forbidden")

        if np.any(self.B[self.begin_state, :] != 0) or np.any(self.B[self.end_state, :] != 0):
            raise ModelValidationError(
                "Symbol emission from the beginning or the ending states is forbidden")

        return True

    def get_state_index(self, name: str) -> int:
        """Resolve a state name to its index."""
        try:
            return self.state_index[name]
        except KeyError:
            raise ModelValidationError(f"Unknown state name: '{name}'")

    def state_name(self, index: int) -> str:
        """Resolve a state index to its name."""
        return self.state_names[index]

    def __repr__(self) -> str:
        """String representation of the HMM."""
        return f"HMMModel(n_states={self.n_states}, alphabet_size={self.alphabet_size})"
