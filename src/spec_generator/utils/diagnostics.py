"""Optional sinks for raw generation output.

Useful when a template starts answering in a shape the extractors do not
recognize: the raw text is kept so the cascade can be checked offline.
"""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path
from typing import Protocol, Union

from .logger import get_logger

logger = get_logger(__name__)


class DiagnosticsSink(Protocol):
    """Receives raw response text before extraction."""

    def record(self, kind: str, label: str, raw_text: str) -> None:
        ...


class NullDiagnosticsSink:
    """Discards everything."""

    def record(self, kind: str, label: str, raw_text: str) -> None:
        return None


def safe_label(label: str) -> str:
    """Lowercase a label and replace anything outside [a-z0-9] with '_'."""
    return re.sub(r"[^a-z0-9]", "_", label, flags=re.IGNORECASE).lower()


class FileDiagnosticsSink:
    """Writes each raw response to ``response_<label>_<date>.txt``."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, kind: str, label: str) -> Path:
        name = f"response_{safe_label(kind)}_{safe_label(label)}_{date.today().isoformat()}.txt"
        return self.directory / name

    def record(self, kind: str, label: str, raw_text: str) -> None:
        path = self.path_for(kind, label)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(raw_text, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write raw response to {path}: {e}")
            return
        logger.debug(f"Raw {kind} response written to {path}")
