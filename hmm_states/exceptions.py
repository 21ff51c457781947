"""
Exception hierarchy for HMMStates system.
"""


class HMMStatesError(Exception):
    """Base exception for HMMStates system."""
    pass


class ModelFormatError(HMMStatesError):
    """Model description file parsing failures."""
    pass


class ModelValidationError(HMMStatesError):
    """Model structure violates begin/end state or dimension invariants."""
    pass


class ExperimentDataError(HMMStatesError):
    """Observation sequence parsing and validation errors."""
    pass


class EvaluationError(HMMStatesError):
    """Prediction estimation export failures."""
    pass
