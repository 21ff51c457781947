"""
Readers for the whitespace-separated model and experiment data formats.

Model file layout (tokens may be split across lines freely):

    <nstates> <state name> * nstates
    <alphabet size>
    <ntransitions> (<from state> <to state> <probability>) * ntransitions
    <nemissions> (<state> <symbol> <probability>) * nemissions

Experiment data layout:

    <nsteps> (<time> <state> <symbol>) * nsteps

The first listed state is the begin state and the last one the end state.
Symbols are single lowercase letters, 'a' being symbol 0.
"""

from pathlib import Path
from typing import Callable, Iterator, List, TextIO, TypeVar, Union

import numpy as np

from ..exceptions import ExperimentDataError, HMMStatesError, ModelFormatError, ModelValidationError
from ..hmm.model import HMMModel, symbol_to_index
from ..hmm.observations import ObservationRecord, ObservationSequence
from ..logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


class _TokenReader:
    """Sequential reader over whitespace-separated tokens."""

    def __init__(self, source: TextIO, error_cls: type, what: str):
        self._tokens: Iterator[str] = (
            token for line in source for token in line.split()
        )
        self._error_cls = error_cls
        self._what = what

    def next_token(self, field: str) -> str:
        try:
            return next(self._tokens)
        except StopIteration:
            raise self._error_cls(f"Unexpected end of {self._what} while reading {field}")

    def _convert(self, field: str, convert: Callable[[str], T], kind: str) -> T:
        token = self.next_token(field)
        try:
            return convert(token)
        except ValueError:
            raise self._error_cls(f"Expected {kind} for {field}, got '{token}'")

    def next_count(self, field: str) -> int:
        value = self._convert(field, int, "a non-negative integer")
        if value < 0:
            raise self._error_cls(f"Expected a non-negative integer for {field}, got {value}")
        return value

    def next_probability(self, field: str) -> float:
        value = self._convert(field, float, "a probability")
        if not value >= 0.0:
            raise self._error_cls(f"Probability for {field} must be non-negative, got {value}")
        return value


def read_model(source: TextIO) -> HMMModel:
    """
    Parse a model description from a text stream.

    Args:
        source: Text stream positioned at the start of a model description

    Returns:
        HMMModel built from the description

    Raises:
        ModelFormatError: If the description is malformed or breaks model invariants
    """
    reader = _TokenReader(source, ModelFormatError, "model description")

    n_states = reader.next_count("state count")
    state_names: List[str] = [reader.next_token(f"state name #{i}") for i in range(n_states)]

    if n_states < 2:
        raise ModelFormatError(f"Model needs at least begin and end states, got {n_states} state(s)")

    state_index = {}
    for i, name in enumerate(state_names):
        if name in state_index:
            raise ModelFormatError(f"Duplicate state name: '{name}'")
        state_index[name] = i

    def resolve_state(name: str) -> int:
        if name not in state_index:
            raise ModelFormatError(f"Unknown state name: '{name}'")
        return state_index[name]

    alphabet_size = reader.next_count("alphabet size")
    if not (1 <= alphabet_size <= 26):
        raise ModelFormatError(f"Alphabet size must be within [1, 26], got {alphabet_size}")

    transition = np.zeros((n_states, n_states))
    n_transitions = reader.next_count("transition count")

    for i in range(n_transitions):
        from_ind = resolve_state(reader.next_token(f"transition #{i} source"))
        to_ind = resolve_state(reader.next_token(f"transition #{i} target"))
        prob = reader.next_probability(f"transition #{i}")

        if from_ind == n_states - 1:
            raise ModelFormatError("Transition from the ending state is forbidden")

        if to_ind == 0:
            raise ModelFormatError("Transition to the starting state is forbidden")

        transition[from_ind, to_ind] = prob

    emission = np.zeros((n_states, alphabet_size))
    n_emissions = reader.next_count("emission count")

    for i in range(n_emissions):
        state_ind = resolve_state(reader.next_token(f"emission #{i} state"))
        symbol = reader.next_token(f"emission #{i} symbol")
        prob = reader.next_probability(f"emission #{i}")

        if state_ind == 0 or state_ind == n_states - 1:
            raise ModelFormatError(
                "Symbol emission from the beginning or the ending states is forbidden")

        emission[state_ind, _symbol_index(symbol, alphabet_size, ModelFormatError)] = prob

    try:
        model = HMMModel(state_names, alphabet_size, transition, emission)
    except ModelValidationError as e:
        raise ModelFormatError(str(e))

    logger.debug(f"Read model: {n_states} states, alphabet {alphabet_size}, "
                 f"{n_transitions} transitions, {n_emissions} emissions")
    return model


def read_experiment(model: HMMModel, source: TextIO) -> ObservationSequence:
    """
    Parse experiment data for a previously loaded model.

    Args:
        model: Model used to resolve state names and symbols
        source: Text stream positioned at the start of experiment data

    Returns:
        ObservationSequence with resolved indices

    Raises:
        ExperimentDataError: If the data is malformed or refers to unknown states
    """
    reader = _TokenReader(source, ExperimentDataError, "experiment data")

    n_steps = reader.next_count("step count")
    records = []

    for i in range(n_steps):
        time = reader.next_count(f"step #{i} time")
        state_name = reader.next_token(f"step #{i} state")
        symbol = reader.next_token(f"step #{i} symbol")

        if state_name not in model.state_index:
            raise ExperimentDataError(f"Unknown state name at step {time}: '{state_name}'")

        records.append(ObservationRecord(
            time,
            model.state_index[state_name],
            _symbol_index(symbol, model.alphabet_size, ExperimentDataError)
        ))

    sequence = ObservationSequence(model, records)

    logger.debug(f"Read experiment data: {len(sequence)} steps")
    return sequence


def load_model(path: Union[str, Path]) -> HMMModel:
    """
    Load a model description file.

    Raises:
        ModelFormatError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    if not path.exists():
        raise ModelFormatError(f"Model file not found: {path}")

    logger.debug(f"Loading model from: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return read_model(f)
    except HMMStatesError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise ModelFormatError(f"Failed to read model from {path}: {e}")


def load_experiment(model: HMMModel, path: Union[str, Path]) -> ObservationSequence:
    """
    Load an experiment data file for the given model.

    Raises:
        ExperimentDataError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    if not path.exists():
        raise ExperimentDataError(f"Experiment data file not found: {path}")

    logger.debug(f"Loading experiment data from: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return read_experiment(model, f)
    except HMMStatesError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise ExperimentDataError(f"Failed to read experiment data from {path}: {e}")


def _symbol_index(symbol: str, alphabet_size: int, error_cls: type) -> int:
    """Convert a single-letter symbol to its index within the alphabet."""
    if len(symbol) != 1 or not ('a' <= symbol <= 'z'):
        raise error_cls(f"Emission symbol must be a single lowercase letter, got '{symbol}'")

    index = symbol_to_index(symbol)
    if index >= alphabet_size:
        raise error_cls(f"Symbol '{symbol}' is outside the alphabet of size {alphabet_size}")

    return index
