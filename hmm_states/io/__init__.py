"""
I/O module.

Readers for the text model description and experiment data formats.
"""

from .readers import read_model, read_experiment, load_model, load_experiment

__all__ = [
    "read_model",
    "read_experiment",
    "load_model",
    "load_experiment"
]
