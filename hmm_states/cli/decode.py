"""
Decoding and estimation CLI commands.

Commands for running Viterbi and Forward-Backward on experiment data and
scoring their predictions against the real hidden states.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import get_config
from ..exceptions import HMMStatesError
from ..hmm import (
    forward_backward,
    index_to_symbol,
    path_probability,
    sequence_probability,
    viterbi_decode
)
from ..evaluate import (
    EvaluationReport,
    estimate_prediction,
    export_confusion_matrix_csv,
    export_report_json,
    most_probable_states
)
from ..io import load_experiment, load_model
from ..logger import get_logger
from .errors import HMMStatesCLIError, handle_cli_error, validate_file_exists

console = Console()
logger = get_logger(__name__)

ALGORITHMS = ('viterbi', 'forward-backward', 'both')
EXPORT_FORMATS = ('json', 'csv')


def _debug_enabled(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.get("debug"))


def estimation_table(report: EvaluationReport, precision: int) -> Table:
    """Build a rich table with per-state estimations of one report."""
    table = Table(title=f"{report.algorithm} (accuracy {report.accuracy:.{precision}f})")

    table.add_column("State", style="cyan")
    for column in ("TP", "FP", "TN", "FN"):
        table.add_column(column, justify="right")
    table.add_column("Precision", justify="right")
    table.add_column("Recall", justify="right")
    table.add_column("F-Measure", justify="right", style="green")

    for state_name, est in zip(report.state_names, report.estimations):
        table.add_row(
            state_name,
            str(est.true_positives),
            str(est.false_positives),
            str(est.true_negatives),
            str(est.false_negatives),
            f"{est.precision:.{precision}f}",
            f"{est.recall:.{precision}f}",
            f"{est.f_measure:.{precision}f}"
        )

    return table


def run_command(
    ctx: typer.Context,
    model_file: Path = typer.Argument(
        ...,
        help="Model description file"
    ),
    data_file: Path = typer.Argument(
        ...,
        help="Experiment data file with real states and emitted symbols"
    ),
    algorithm: Optional[str] = typer.Option(
        None,
        "--algorithm",
        "-a",
        help="Algorithm to run (viterbi/forward-backward/both)"
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory for exported estimation reports"
    ),
    export_format: Optional[List[str]] = typer.Option(
        None,
        "--format",
        help="Export formats for reports (json/csv), can be used multiple times"
    ),
    show_path: bool = typer.Option(
        False,
        "--show-path",
        help="Print predicted state sequences"
    )
):
    """
    Decode experiment data and estimate prediction quality.

    Examples:
    ```
    hmm-states run model.txt data.txt
    hmm-states run model.txt data.txt -a viterbi --show-path
    hmm-states run model.txt data.txt -o results/ --format json --format csv
    ```
    """
    algorithm = algorithm or get_config('decoding', 'default_algorithm') or 'both'
    if algorithm not in ALGORITHMS:
        raise typer.BadParameter(
            f"Unknown algorithm '{algorithm}', expected one of: {', '.join(ALGORITHMS)}",
            param_hint="--algorithm"
        )

    formats = export_format or get_config('evaluation', 'export_formats') or ['json']
    for fmt in formats:
        if fmt not in EXPORT_FORMATS:
            raise typer.BadParameter(
                f"Unsupported format '{fmt}', expected one of: {', '.join(EXPORT_FORMATS)}",
                param_hint="--format"
            )

    precision = get_config('evaluation', 'float_precision')
    if precision is None:
        precision = 4

    try:
        validate_file_exists(model_file, "model file")
        validate_file_exists(data_file, "experiment data file")

        model = load_model(model_file)
        observations = load_experiment(model, data_file)

        console.print(Panel.fit(
            f"[bold]HMM State Decoding[/bold]\n"
            f"Model: {model_file} ({model.n_states} states, alphabet {model.alphabet_size})\n"
            f"Data: {data_file} ({len(observations)} steps)\n"
            f"Algorithm: {algorithm}",
            border_style="blue"
        ))

        reports = []

        if algorithm in ('viterbi', 'both'):
            path = viterbi_decode(model, observations)
            report = estimate_prediction(model, observations, path, 'viterbi')
            report.extra['path_probability'] = path_probability(model, observations, path)
            reports.append(report)

        if algorithm in ('forward-backward', 'both'):
            pairs = forward_backward(model, observations)
            states = most_probable_states(pairs)
            report = estimate_prediction(model, observations, states, 'forward-backward')
            report.extra['sequence_probability'] = sequence_probability(model, observations)
            reports.append(report)

        for report in reports:
            console.print(estimation_table(report, precision))

            if show_path:
                predicted = " ".join(report.state_names[s] for s in report.predicted_states)
                console.print(f"[bold]{report.algorithm} path:[/bold] {predicted}")

        if output_dir is not None:
            if 'json' in formats:
                json_path = export_report_json(reports, output_dir / "estimation_report.json")
                console.print(f"[green]Report saved to: {json_path}[/green]")

            if 'csv' in formats:
                for report in reports:
                    csv_path = export_confusion_matrix_csv(
                        report, output_dir / f"{report.algorithm}_confusion_matrix.csv")
                    console.print(f"[green]Confusion matrix saved to: {csv_path}[/green]")

    except (HMMStatesError, HMMStatesCLIError, ValueError) as e:
        handle_cli_error(e, "run", _debug_enabled(ctx))


def decode_command(
    ctx: typer.Context,
    model_file: Path = typer.Argument(
        ...,
        help="Model description file"
    ),
    data_file: Path = typer.Argument(
        ...,
        help="Experiment data file with real states and emitted symbols"
    )
):
    """
    Print the Viterbi path next to the real states.
    """
    try:
        validate_file_exists(model_file, "model file")
        validate_file_exists(data_file, "experiment data file")

        model = load_model(model_file)
        observations = load_experiment(model, data_file)

        path = viterbi_decode(model, observations)

        table = Table(title="Viterbi path")
        table.add_column("Time", justify="right")
        table.add_column("Symbol", justify="center")
        table.add_column("Real state", style="cyan")
        table.add_column("Predicted state", style="green")

        for record, predicted in zip(observations, path):
            table.add_row(
                str(record.time),
                index_to_symbol(record.symbol),
                model.state_name(record.state),
                model.state_name(predicted)
            )

        console.print(table)
        console.print(f"Path probability: {path_probability(model, observations, path):.6e}")

    except (HMMStatesError, HMMStatesCLIError) as e:
        handle_cli_error(e, "decode", _debug_enabled(ctx))
