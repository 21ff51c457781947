"""
Prediction estimation for decoded hidden state sequences.

This module turns predicted state sequences into a per-state confusion matrix
and derives true/false positive/negative counts and F-measure from it, along
with JSON and CSV export of the results.
"""

import csv
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import numpy as np

from ..exceptions import EvaluationError
from ..hmm.model import HMMModel
from ..hmm.observations import ObservationSequence
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass
class PredictionEstimation:
    """Per-state prediction quality derived from a confusion matrix."""
    true_positives: int
    false_positives: int
    true_negatives: int
    false_negatives: int
    f_measure: float
    precision: float = 0.0
    recall: float = 0.0

    @property
    def support(self) -> int:
        """Number of steps whose real state is this state."""
        return self.true_positives + self.false_negatives

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['support'] = self.support
        return result


@dataclass
class EvaluationReport:
    """Estimation of one algorithm's predictions against ground truth."""
    algorithm: str
    state_names: List[str]
    predicted_states: List[int]
    confusion_matrix: np.ndarray
    estimations: List[PredictionEstimation]
    accuracy: float
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'algorithm': self.algorithm,
            'total_steps': int(np.sum(self.confusion_matrix)),
            'accuracy': self.accuracy,
            'predicted_states': [self.state_names[s] for s in self.predicted_states],
            'confusion_matrix': {
                'matrix': self.confusion_matrix.tolist(),
                'state_names': self.state_names,
                'layout': 'matrix[predicted][real]'
            },
            'per_state': {
                name: estimation.to_dict()
                for name, estimation in zip(self.state_names, self.estimations)
            },
            **self.extra
        }


def most_probable_states(forward_backward_prob: Union[np.ndarray, Sequence]) -> List[int]:
    """
    Pick the most probable state at each step from alpha-beta pairs.

    Args:
        forward_backward_prob: [T, n_states, 2] alpha-beta pairs

    Returns:
        List of T state indices maximizing alpha * beta, lowest index on ties
    """
    pairs = np.asarray(forward_backward_prob, dtype=float)

    if pairs.ndim != 3 or pairs.shape[2] != 2:
        raise ValueError(f"Expected alpha-beta pairs of shape [T, n_states, 2], got {pairs.shape}")

    likelihood = pairs[:, :, 0] * pairs[:, :, 1]
    states = np.argmax(likelihood, axis=1)

    return [int(s) for s in states]


def compute_confusion_matrix(observations: ObservationSequence,
                             predicted_states: Sequence[int],
                             model: HMMModel) -> np.ndarray:
    """
    Combine real and predicted states into a confusion matrix.

    Args:
        observations: Experiment data carrying the real hidden states
        predicted_states: Predicted state index per time step
        model: Model defining the state count

    Returns:
        Integer matrix [n_states, n_states] where entry (i, j) counts steps
        predicted as state i whose real state is j

    Raises:
        ValueError: If lengths differ or a predicted state is out of range
    """
    if len(observations) != len(predicted_states):
        raise ValueError(
            f"Length mismatch: observations={len(observations)}, predicted={len(predicted_states)}")

    n_states = model.n_states
    confusion_matrix = np.zeros((n_states, n_states), dtype=int)

    for record, predicted in zip(observations, predicted_states):
        if not (0 <= predicted < n_states):
            raise ValueError(f"Predicted state {predicted} at time {record.time} "
                             f"outside [0, {n_states})")
        confusion_matrix[predicted, record.state] += 1

    logger.debug(f"Confusion matrix computed: {n_states}x{n_states} states, {len(observations)} steps")

    return confusion_matrix


def compute_state_estimations(confusion_matrix: np.ndarray) -> List[PredictionEstimation]:
    """
    Derive per-state prediction estimations from a confusion matrix.

    Rows are predicted states, columns are real states. Precision is taken
    over the row, recall over the column. A state that is neither predicted
    nor present gets an F-measure of 0, and so does a state whose precision
    and recall are both 0.

    Args:
        confusion_matrix: Square matrix [n_states, n_states]

    Returns:
        List of PredictionEstimation indexed by state
    """
    matrix = np.asarray(confusion_matrix)

    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"Confusion matrix must be square, got shape {matrix.shape}")

    row_sums = matrix.sum(axis=1)
    col_sums = matrix.sum(axis=0)
    total = int(row_sums.sum())

    estimations = []

    for s in range(matrix.shape[0]):
        row_sum = int(row_sums[s])
        col_sum = int(col_sums[s])

        tp = int(matrix[s, s])
        fp = row_sum - tp
        fn = col_sum - tp
        tn = total - row_sum - col_sum + tp

        precision = tp / row_sum if row_sum > 0 else 0.0
        recall = tp / col_sum if col_sum > 0 else 0.0

        if row_sum == 0 and col_sum == 0:
            f_measure = 0.0
        elif precision + recall == 0:
            # Predicted or present, but never correctly
            f_measure = 0.0
        else:
            f_measure = 2 * precision * recall / (precision + recall)

        estimations.append(PredictionEstimation(
            true_positives=tp,
            false_positives=fp,
            true_negatives=tn,
            false_negatives=fn,
            f_measure=f_measure,
            precision=precision,
            recall=recall
        ))

    return estimations


def compute_accuracy(observations: ObservationSequence, predicted_states: Sequence[int]) -> float:
    """Fraction of time steps whose predicted state equals the real state."""
    if len(observations) != len(predicted_states):
        raise ValueError(
            f"Length mismatch: observations={len(observations)}, predicted={len(predicted_states)}")

    correct = int(np.sum(observations.true_states == np.asarray(predicted_states)))
    accuracy = correct / len(observations)

    logger.debug(f"Accuracy: {correct}/{len(observations)} = {accuracy:.4f}")

    return accuracy


def estimate_prediction(model: HMMModel, observations: ObservationSequence,
                        predicted_states: Sequence[int], algorithm: str) -> EvaluationReport:
    """
    Run the full estimation for one algorithm's predictions.

    Args:
        model: Model the predictions were made with
        observations: Experiment data with real states
        predicted_states: Predicted state index per time step
        algorithm: Name of the algorithm that produced the predictions

    Returns:
        EvaluationReport with confusion matrix, per-state estimations and accuracy
    """
    confusion_matrix = compute_confusion_matrix(observations, predicted_states, model)
    estimations = compute_state_estimations(confusion_matrix)

    report = EvaluationReport(
        algorithm=algorithm,
        state_names=list(model.state_names),
        predicted_states=[int(s) for s in predicted_states],
        confusion_matrix=confusion_matrix,
        estimations=estimations,
        accuracy=compute_accuracy(observations, predicted_states)
    )

    logger.info(f"{algorithm}: accuracy {report.accuracy:.4f} over {len(observations)} steps")

    return report


def export_report_json(reports: Sequence[EvaluationReport], output_path: Union[str, Path]) -> Path:
    """
    Export evaluation reports to a JSON file.

    Raises:
        EvaluationError: If the file cannot be written
    """
    output_path = Path(output_path)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)

        export_data = {report.algorithm: report.to_dict() for report in reports}

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(export_data, f, indent=2, ensure_ascii=False)

    except (OSError, TypeError) as e:
        raise EvaluationError(f"Failed to export report to JSON: {e}")

    logger.info(f"Evaluation report exported to JSON: {output_path}")
    return output_path


def export_confusion_matrix_csv(report: EvaluationReport, output_path: Union[str, Path]) -> Path:
    """
    Export one report's confusion matrix and per-state estimations to CSV.

    Raises:
        EvaluationError: If the file cannot be written
    """
    output_path = Path(output_path)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)

            writer.writerow(['Predicted\\Real'] + report.state_names)
            for i, state_name in enumerate(report.state_names):
                writer.writerow([state_name] + report.confusion_matrix[i, :].tolist())

            writer.writerow([])

            writer.writerow(['State', 'TP', 'FP', 'TN', 'FN', 'Precision', 'Recall', 'F-Measure'])
            for state_name, est in zip(report.state_names, report.estimations):
                writer.writerow([
                    state_name,
                    est.true_positives,
                    est.false_positives,
                    est.true_negatives,
                    est.false_negatives,
                    est.precision,
                    est.recall,
                    est.f_measure
                ])

    except OSError as e:
        raise EvaluationError(f"Failed to export confusion matrix to CSV: {e}")

    logger.info(f"Confusion matrix exported to CSV: {output_path}")
    return output_path
