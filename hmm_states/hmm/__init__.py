"""
Hidden Markov Model module.

Discrete HMM description with Viterbi decoding and Forward-Backward inference.
"""

from .model import HMMModel, symbol_to_index, index_to_symbol
from .observations import ObservationRecord, ObservationSequence
from .viterbi import viterbi_decode, viterbi_tables, path_probability
from .forward_backward import (
    forward_backward,
    forward_probabilities,
    backward_probabilities,
    sequence_probability
)

__all__ = [
    "HMMModel",
    "symbol_to_index",
    "index_to_symbol",
    "ObservationRecord",
    "ObservationSequence",
    "viterbi_decode",
    "viterbi_tables",
    "path_probability",
    "forward_backward",
    "forward_probabilities",
    "backward_probabilities",
    "sequence_probability"
]
