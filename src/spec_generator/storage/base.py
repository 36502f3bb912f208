"""
Project store interface.

Callers of the generation pipeline persist its output through this interface;
the pipeline itself never touches storage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models.project import Epic, StoryStatus


class ProjectStore(ABC):
    """
    Abstract base class for project content storage.
    """

    @abstractmethod
    async def save_project_epics(self, project_id: str, epics: list[Epic]) -> list[Epic]:
        """Replace a project's epics; returns them with ids assigned."""
        ...

    @abstractmethod
    async def load_project_epics(self, project_id: str) -> list[Epic]:
        """Load a project's epics, or an empty list for an unknown project."""
        ...

    @abstractmethod
    async def update_story_status(self, story_id: str, status: StoryStatus) -> None:
        """Change a story's status.

        Raises:
            NotFoundError: If no stored project holds the story.
        """
        ...
