"""Utility modules for the specification generator."""

from .logger import setup_logger, setup_logging, get_logger, log_operation
from .diagnostics import DiagnosticsSink, NullDiagnosticsSink, FileDiagnosticsSink

__all__ = [
    "setup_logger",
    "setup_logging",
    "get_logger",
    "log_operation",
    "DiagnosticsSink",
    "NullDiagnosticsSink",
    "FileDiagnosticsSink",
]
