"""
Observation sequence representation.

Experiment data pairs every emitted symbol with the hidden state that really
produced it, so that decoded sequences can be scored against ground truth.
"""

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple, Union

import numpy as np

from ..exceptions import ExperimentDataError
from .model import HMMModel


@dataclass(frozen=True)
class ObservationRecord:
    """Single (time, true state, emitted symbol) triple."""
    time: int
    state: int
    symbol: int


class ObservationSequence:
    """
    Immutable ordered sequence of observation records.

    Records are validated against the model they were resolved with: times
    run 0, 1, 2, ..., states lie in [0, N) and symbols in [0, alphabet_size).
    """

    def __init__(self, model: HMMModel, records: Sequence[Union[ObservationRecord, Tuple[int, int, int]]]):
        """
        Initialize ObservationSequence.

        Args:
            model: Model the state and symbol indices refer to
            records: Observation records or (time, state, symbol) tuples

        Raises:
            ExperimentDataError: If the records are empty or inconsistent with the model
        """
        converted = tuple(
            r if isinstance(r, ObservationRecord) else ObservationRecord(*r)
            for r in records
        )

        if not converted:
            raise ExperimentDataError("Observation sequence must contain at least one record")

        for expected_time, record in enumerate(converted):
            if record.time != expected_time:
                raise ExperimentDataError(
                    f"Time step {record.time} out of order, expected {expected_time}")

            if not (0 <= record.state < model.n_states):
                raise ExperimentDataError(
                    f"State index {record.state} at time {record.time} "
                    f"outside [0, {model.n_states})")

            if not (0 <= record.symbol < model.alphabet_size):
                raise ExperimentDataError(
                    f"Symbol index {record.symbol} at time {record.time} "
                    f"outside [0, {model.alphabet_size})")

        self._records = converted
        self._symbols = np.array([r.symbol for r in converted], dtype=int)
        self._states = np.array([r.state for r in converted], dtype=int)
        self._symbols.flags.writeable = False
        self._states.flags.writeable = False

    @classmethod
    def from_symbols(cls, model: HMMModel, symbols: Sequence[int],
                     true_states: Sequence[int]) -> 'ObservationSequence':
        """Build a sequence from parallel symbol and true-state index lists."""
        if len(symbols) != len(true_states):
            raise ExperimentDataError(
                f"Length mismatch: symbols={len(symbols)}, true_states={len(true_states)}")

        records = [
            ObservationRecord(t, int(state), int(symbol))
            for t, (state, symbol) in enumerate(zip(true_states, symbols))
        ]
        return cls(model, records)

    @property
    def records(self) -> Tuple[ObservationRecord, ...]:
        return self._records

    @property
    def symbols(self) -> np.ndarray:
        """Emitted symbol indices [T]."""
        return self._symbols

    @property
    def true_states(self) -> np.ndarray:
        """Ground-truth hidden state indices [T]."""
        return self._states

    @property
    def times(self) -> np.ndarray:
        return np.arange(len(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ObservationRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> ObservationRecord:
        return self._records[index]

    def __repr__(self) -> str:
        return f"ObservationSequence(length={len(self)})"
