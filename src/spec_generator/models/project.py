"""Project planning records produced by the extraction cascade.

Field aliases follow the camelCase shape used by the generation templates and
by stored project content (``problemAddressed``, ``acceptanceCriteria``...),
so records round-trip through JSON with ``model_dump(by_alias=True)``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StoryStatus(str, Enum):
    """Workflow status of a user story."""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class AcceptanceCriterion(BaseModel):
    """A Given/When/Then triple."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = None
    given: str
    when: str
    then: str


class UserStory(BaseModel):
    """A user story owned by exactly one epic (by title)."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    epic_title: str = Field(..., alias="epic", description="Title of the owning epic")
    statement: str = Field(
        ...,
        alias="story",
        description="'As a <role>, I want <action>, so that <benefit>' sentence; empty when absent",
    )
    acceptance_criteria: list[AcceptanceCriterion] = Field(
        default_factory=list, alias="acceptanceCriteria"
    )
    kpis: str = ""
    design_link: str = Field(default="", alias="designLink")
    status: StoryStatus = StoryStatus.TODO


class Epic(BaseModel):
    """A top-level grouping of a project goal."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    title: str
    objective: str = ""
    problem_addressed: str = Field(default="", alias="problemAddressed")
    business_value: str = Field(default="", alias="businessValue")
    stories: list[UserStory] = Field(default_factory=list)


class ProjectContent(BaseModel):
    """Epics (with their stories) generated for one project."""

    epics: list[Epic] = Field(default_factory=list)

    @property
    def story_count(self) -> int:
        return sum(len(epic.stories) for epic in self.epics)
