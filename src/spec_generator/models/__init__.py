"""Data models for the specification generator."""

from .job import (
    GenerationJob,
    JobKind,
    JobStatus,
    JobStatusReport,
    SessionMessage,
    TERMINAL_STATUSES,
)
from .project import (
    AcceptanceCriterion,
    Epic,
    ProjectContent,
    StoryStatus,
    UserStory,
)

__all__ = [
    "GenerationJob",
    "JobKind",
    "JobStatus",
    "JobStatusReport",
    "SessionMessage",
    "TERMINAL_STATUSES",
    "AcceptanceCriterion",
    "Epic",
    "ProjectContent",
    "StoryStatus",
    "UserStory",
]
