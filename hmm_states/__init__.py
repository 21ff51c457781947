"""
HMMStates: hidden state inference and evaluation for discrete HMMs

A Python library for decoding hidden state sequences of first-order discrete
Hidden Markov Models with the Viterbi and Forward-Backward algorithms, and for
scoring predictions against ground truth.
"""

__version__ = "0.1.0"
__author__ = "HMMStates Development Team"

from .config import get_config, set_config
from .logger import get_logger

__all__ = [
    "get_config",
    "set_config",
    "get_logger",
    "__version__"
]
