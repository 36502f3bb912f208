"""
JSON file project store: one document per project under a root directory.
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Union

from ..core.exceptions import NotFoundError
from ..models.project import Epic, StoryStatus
from ..utils.logger import get_logger
from .base import ProjectStore

logger = get_logger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _with_ids(epic: Epic) -> Epic:
    """Copy of the epic with ids on the epic, its stories and their criteria."""
    stories = []
    for story in epic.stories:
        criteria = [
            c if c.id else c.model_copy(update={"id": _new_id()})
            for c in story.acceptance_criteria
        ]
        stories.append(story.model_copy(update={
            "id": story.id or _new_id(),
            "epic_title": epic.title,
            "acceptance_criteria": criteria,
        }))
    return epic.model_copy(update={"id": epic.id or _new_id(), "stories": stories})


class JsonFileProjectStore(ProjectStore):
    """
    Stores each project as ``<root>/<project_id>.json``.
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def _path(self, project_id: str) -> Path:
        return self.root / f"{project_id}.json"

    def _read(self, path: Path) -> list[Epic]:
        data = json.loads(path.read_text(encoding="utf-8"))
        return [Epic.model_validate(item) for item in data.get("epics", [])]

    def _write(self, project_id: str, epics: list[Epic]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        document = {
            "project_id": project_id,
            "epics": [epic.model_dump(mode="json", by_alias=True) for epic in epics],
        }
        self._path(project_id).write_text(
            json.dumps(document, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )

    async def save_project_epics(self, project_id: str, epics: list[Epic]) -> list[Epic]:
        """Save epics, assigning missing ids."""
        stored = [_with_ids(epic) for epic in epics]
        self._write(project_id, stored)
        logger.info(f"Saved {len(stored)} epics for project {project_id}")
        return stored

    async def load_project_epics(self, project_id: str) -> list[Epic]:
        """Load epics for a project."""
        path = self._path(project_id)
        if not path.exists():
            logger.debug(f"No stored content for project {project_id}")
            return []
        return self._read(path)

    async def update_story_status(self, story_id: str, status: StoryStatus) -> None:
        """Update a story's status in whichever project holds it."""
        for path in sorted(self.root.glob("*.json")):
            epics = self._read(path)
            for epic in epics:
                for story in epic.stories:
                    if story.id == story_id:
                        story.status = status
                        self._write(path.stem, epics)
                        logger.info(f"Story {story_id} set to {status.value}")
                        return

        raise NotFoundError("UserStory", story_id)
