"""Text extraction for generated epics and user stories."""

from .cascade import (
    ExtractionCascade,
    epic_cascade,
    extract_epics,
    extract_stories,
    story_cascade,
)
from .criteria import extract_criteria, find_criteria_section
from .fields import extract_field, extract_field_any
from .strategies import ExtractionContext, ExtractionStrategy

__all__ = [
    "ExtractionCascade",
    "ExtractionContext",
    "ExtractionStrategy",
    "epic_cascade",
    "extract_criteria",
    "extract_epics",
    "extract_field",
    "extract_field_any",
    "extract_stories",
    "find_criteria_section",
    "story_cascade",
]
