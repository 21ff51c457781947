"""
Evaluation module.

Confusion matrices and per-state prediction estimations.
"""

from .metrics import (
    PredictionEstimation,
    EvaluationReport,
    most_probable_states,
    compute_confusion_matrix,
    compute_state_estimations,
    compute_accuracy,
    estimate_prediction,
    export_report_json,
    export_confusion_matrix_csv
)

__all__ = [
    "PredictionEstimation",
    "EvaluationReport",
    "most_probable_states",
    "compute_confusion_matrix",
    "compute_state_estimations",
    "compute_accuracy",
    "estimate_prediction",
    "export_report_json",
    "export_confusion_matrix_csv"
]
