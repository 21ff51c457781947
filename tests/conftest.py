"""
Test configuration and fixtures for HMMStates.

This file contains pytest configuration and shared fixtures
for testing the HMMStates system.
"""

import io
import tempfile
from pathlib import Path

import numpy as np
import pytest

from hmm_states.config import reset_config
from hmm_states.logger import disable_file_logging, set_log_level
from hmm_states.hmm import HMMModel, ObservationSequence


SCENARIO_MODEL_TEXT = """4 begin A B end
2
6
begin A 0.6
begin B 0.4
A A 0.7
A B 0.3
B A 0.4
B B 0.6
4
A a 0.9
A b 0.1
B a 0.2
B b 0.8
"""

SCENARIO_DATA_TEXT = """3
0 A a
1 A a
2 B b
"""


@pytest.fixture(autouse=True)
def restore_config():
    """Reset global configuration and logging after every test."""
    yield
    reset_config()
    disable_file_logging()
    set_log_level('INFO')


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def scenario_model():
    """Four-state model: begin=0, A=1, B=2, end=3 over symbols a, b."""
    transition = np.array([
        [0.0, 0.6, 0.4, 0.0],
        [0.0, 0.7, 0.3, 0.0],
        [0.0, 0.4, 0.6, 0.0],
        [0.0, 0.0, 0.0, 0.0]
    ])
    emission = np.array([
        [0.0, 0.0],
        [0.9, 0.1],
        [0.2, 0.8],
        [0.0, 0.0]
    ])
    return HMMModel(['begin', 'A', 'B', 'end'], 2, transition, emission)


@pytest.fixture
def scenario_observations(scenario_model):
    """Symbols a, a, b emitted by states A, A, B."""
    return ObservationSequence.from_symbols(scenario_model, [0, 0, 1], [1, 1, 2])


@pytest.fixture
def symmetric_model():
    """Model whose two emitting states are indistinguishable."""
    transition = np.array([
        [0.0, 0.5, 0.5, 0.0],
        [0.0, 0.5, 0.5, 0.0],
        [0.0, 0.5, 0.5, 0.0],
        [0.0, 0.0, 0.0, 0.0]
    ])
    emission = np.array([
        [0.0, 0.0],
        [0.5, 0.5],
        [0.5, 0.5],
        [0.0, 0.0]
    ])
    return HMMModel.from_arrays(transition, emission)


@pytest.fixture
def model_files(temp_dir):
    """Write the scenario model and experiment data to text files."""
    model_path = temp_dir / "model.txt"
    data_path = temp_dir / "data.txt"
    model_path.write_text(SCENARIO_MODEL_TEXT)
    data_path.write_text(SCENARIO_DATA_TEXT)
    return model_path, data_path


@pytest.fixture
def model_stream():
    return io.StringIO(SCENARIO_MODEL_TEXT)


@pytest.fixture
def scenario_data_text():
    return SCENARIO_DATA_TEXT


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
