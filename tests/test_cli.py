"""
Tests for the command line interface.

Tests command wiring, exported reports and exit codes for invalid input.
"""

import json
import logging

import pytest
from typer.testing import CliRunner

from hmm_states.cli.errors import (
    EXIT_CODES,
    HMMStatesCLIError,
    check_system_requirements,
    validate_file_exists
)
from hmm_states.cli.main import app
from hmm_states.config import reset_config


@pytest.fixture
def cli_runner():
    """Create CLI runner for testing."""
    return CliRunner()


class TestHelpSystem:
    """Test help and informational commands."""

    def test_main_help(self, cli_runner):
        result = cli_runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "run" in result.stdout
        assert "decode" in result.stdout

    def test_version(self, cli_runner):
        result = cli_runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "HMMStates Version" in result.stdout

    def test_system_requirements(self):
        requirements = check_system_requirements()

        assert requirements["numpy"]["installed"] is True
        assert requirements["python_version"]["satisfied"] is True


class TestRunCommand:
    """Test the run command."""

    def test_both_algorithms(self, cli_runner, model_files):
        model_path, data_path = model_files

        result = cli_runner.invoke(app, ["run", str(model_path), str(data_path)])

        assert result.exit_code == 0
        assert "viterbi" in result.stdout
        assert "forward-backward" in result.stdout

    def test_show_path(self, cli_runner, model_files):
        model_path, data_path = model_files

        result = cli_runner.invoke(
            app, ["run", str(model_path), str(data_path), "-a", "viterbi", "--show-path"])

        assert result.exit_code == 0
        assert "A A B" in result.stdout

    def test_export_reports(self, cli_runner, model_files, temp_dir):
        model_path, data_path = model_files
        output_dir = temp_dir / "results"

        result = cli_runner.invoke(app, [
            "run", str(model_path), str(data_path),
            "-a", "viterbi", "-o", str(output_dir),
            "--format", "json", "--format", "csv"
        ])

        assert result.exit_code == 0
        assert (output_dir / "viterbi_confusion_matrix.csv").exists()

        with open(output_dir / "estimation_report.json") as f:
            report = json.load(f)

        assert list(report) == ["viterbi"]
        assert report["viterbi"]["accuracy"] == 1.0
        assert report["viterbi"]["predicted_states"] == ["A", "A", "B"]

    def test_unknown_algorithm(self, cli_runner, model_files):
        model_path, data_path = model_files

        result = cli_runner.invoke(app, ["run", str(model_path), str(data_path), "-a", "baum-welch"])

        assert result.exit_code == EXIT_CODES["invalid_usage"]

    def test_missing_model_file(self, cli_runner, model_files, temp_dir):
        _, data_path = model_files

        result = cli_runner.invoke(app, ["run", str(temp_dir / "absent.txt"), str(data_path)])

        assert result.exit_code == EXIT_CODES["invalid_usage"]
        assert "not found" in result.stdout

    def test_invalid_model(self, cli_runner, model_files):
        model_path, data_path = model_files
        model_path.write_text("3 begin X end 1 1 X begin 0.5 0")

        result = cli_runner.invoke(app, ["run", str(model_path), str(data_path)])

        assert result.exit_code == EXIT_CODES["model_error"]
        assert "starting state" in result.stdout

    def test_invalid_experiment_data(self, cli_runner, model_files):
        model_path, data_path = model_files
        data_path.write_text("1\n0 C a\n")

        result = cli_runner.invoke(app, ["run", str(model_path), str(data_path)])

        assert result.exit_code == EXIT_CODES["data_error"]

    def test_default_algorithm_from_config(self, cli_runner, model_files, temp_dir):
        model_path, data_path = model_files
        config_path = temp_dir / "config.json"
        config_path.write_text(json.dumps({"decoding": {"default_algorithm": "forward-backward"}}))

        result = cli_runner.invoke(app, [
            "--config", str(config_path), "run", str(model_path), str(data_path),
            "-o", str(temp_dir)
        ])

        assert result.exit_code == 0
        with open(temp_dir / "estimation_report.json") as f:
            report = json.load(f)
        assert list(report) == ["forward-backward"]
        assert report["forward-backward"]["sequence_probability"] == pytest.approx(0.13623)


class TestDecodeCommand:
    """Test the decode command."""

    def test_decode_scenario(self, cli_runner, model_files):
        model_path, data_path = model_files

        result = cli_runner.invoke(app, ["decode", str(model_path), str(data_path)])

        assert result.exit_code == 0
        assert "Path probability" in result.stdout


class TestFileValidation:
    """Test input file validation helpers."""

    def test_missing_file_suggests_similar(self, temp_dir):
        (temp_dir / "model_a.txt").touch()

        with pytest.raises(HMMStatesCLIError) as exc_info:
            validate_file_exists(temp_dir / "model_b.txt", "model file")

        error = exc_info.value
        assert error.exit_code == EXIT_CODES["invalid_usage"]
        assert "Model file not found" in error.message
        assert any("model_a.txt" in s for s in error.suggestions)


class TestLoggingOptions:
    """Test logging configuration applied by the global options."""

    def test_config_file_sets_log_level(self, cli_runner, model_files, temp_dir):
        model_path, data_path = model_files
        config_path = temp_dir / "config.json"
        config_path.write_text(json.dumps({"logging": {"level": "ERROR"}}))

        result = cli_runner.invoke(app, ["--config", str(config_path), "run", str(model_path), str(data_path)])

        assert result.exit_code == 0
        assert logging.getLogger("hmm_states").level == logging.ERROR

    def test_environment_sets_log_level(self, cli_runner, model_files, monkeypatch):
        model_path, data_path = model_files
        monkeypatch.setenv("HMM_STATES_LOG_LEVEL", "WARNING")
        reset_config()

        result = cli_runner.invoke(app, ["run", str(model_path), str(data_path)])

        assert result.exit_code == 0
        assert logging.getLogger("hmm_states").level == logging.WARNING

    def test_verbose_overrides_configured_level(self, cli_runner, model_files, temp_dir):
        model_path, data_path = model_files
        config_path = temp_dir / "config.json"
        config_path.write_text(json.dumps({"logging": {"level": "ERROR"}}))

        result = cli_runner.invoke(
            app, ["--verbose", "--config", str(config_path), "run", str(model_path), str(data_path)])

        assert result.exit_code == 0
        assert logging.getLogger("hmm_states").level == logging.DEBUG

    def test_invalid_log_level(self, cli_runner, model_files, temp_dir):
        model_path, data_path = model_files
        config_path = temp_dir / "config.json"
        config_path.write_text(json.dumps({"logging": {"level": "LOUD"}}))

        result = cli_runner.invoke(app, ["--config", str(config_path), "run", str(model_path), str(data_path)])

        assert result.exit_code == EXIT_CODES["config_error"]

    def test_config_file_enables_file_logging(self, cli_runner, model_files, temp_dir):
        model_path, data_path = model_files
        log_file = temp_dir / "run.log"
        config_path = temp_dir / "config.json"
        config_path.write_text(json.dumps({
            "logging": {"file_logging": True, "log_file": str(log_file)}
        }))

        result = cli_runner.invoke(app, ["--config", str(config_path), "run", str(model_path), str(data_path)])

        assert result.exit_code == 0
        for handler in logging.getLogger("hmm_states").handlers:
            handler.flush()
        assert "accuracy 1.0000 over 3 steps" in log_file.read_text()


class TestPrecisionOption:
    """Test float precision taken from configuration."""

    def test_zero_precision(self, cli_runner, model_files, monkeypatch):
        model_path, data_path = model_files
        monkeypatch.setenv("HMM_STATES_FLOAT_PRECISION", "0")
        reset_config()

        result = cli_runner.invoke(app, ["run", str(model_path), str(data_path), "-a", "viterbi"])

        assert result.exit_code == 0
        assert "accuracy 1)" in result.stdout
        assert "1.0000" not in result.stdout
