"""
Specification Generator

Turns a project description into epics, user stories and acceptance criteria
using a conversational generation service.
"""

__version__ = "0.1.0"

from .core.generator import GenerationService
from .models.project import AcceptanceCriterion, Epic, ProjectContent, StoryStatus, UserStory

__all__ = [
    "GenerationService",
    "AcceptanceCriterion",
    "Epic",
    "ProjectContent",
    "StoryStatus",
    "UserStory",
]
