"""Extraction strategies for generated epic and story text.

Every strategy implements ``extract(text, context) -> list[record]`` and
returns an empty list when its format is not present. None of them raise on
unexpected input.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError

from ..models.project import AcceptanceCriterion, Epic, UserStory
from ..utils.logger import get_logger
from .criteria import extract_criteria
from .fields import extract_field_any
from .patterns import (
    EPIC_MARKER_RE,
    NARRATIVE_RE,
    NUMBERED_EPIC_RE,
    NUMBERED_NARRATIVE_RE,
    STORY_MARKER_RE,
    sentence_of,
    strip_emphasis,
    title_from_heading,
)

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", Epic, UserStory)

# Label aliases, most specific first
TITLE_LABELS = ("Titre", "Title", "Nom")
OBJECTIVE_LABELS = ("Objectif", "Objectifs", "Objective")
PROBLEM_LABELS = ("Problématique adressée", "Problématique", "Problème adressé", "Problem Addressed", "Problem")
BUSINESS_VALUE_LABELS = ("Valeur métier", "Valeur business", "Valeur ajoutée", "Business Value")
KPI_LABELS = ("KPIs définis", "KPIs", "KPI", "Indicateurs clés")
DESIGN_LINK_LABELS = ("Lien vers la maquette", "Lien vers le design", "Lien maquette", "Design Link")

_JSON_BLOCK_RE = re.compile(r"```json[ \t]*\n?(?P<body>.*?)```", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class ExtractionContext:
    """Identifiers the caller already knows; they win over any echoed by the model."""

    project_title: str = ""
    epic_title: str = ""


class ExtractionStrategy(ABC, Generic[RecordT]):
    """One way of reading records out of a response body."""

    name: str = "strategy"

    @abstractmethod
    def extract(self, text: str, context: ExtractionContext) -> list[RecordT]:
        """Return the records found, or an empty list."""
        ...


# =============================================================================
# Embedded JSON
# =============================================================================


class _CriterionPayload(BaseModel):
    given: str
    when: str
    then: str


class _StoryPayload(BaseModel):
    story: str
    acceptance_criteria: list[_CriterionPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("acceptanceCriteria", "acceptance_criteria"),
    )
    kpis: Optional[str] = None
    design_link: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("designLink", "design_link"),
    )


class _EpicPayload(BaseModel):
    title: str
    objective: Optional[str] = None
    problem_addressed: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("problemAddressed", "problem_addressed"),
    )
    business_value: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("businessValue", "business_value"),
    )


class EmbeddedJsonStrategy(ExtractionStrategy[RecordT]):
    """Reads a fenced ```json block holding ``{"<array_field>": [...]}``.

    The array is validated as a whole; any shape mismatch means the strategy
    did not match.
    """

    name = "embedded-json"
    array_field: str = ""
    payload_adapter: TypeAdapter

    def extract(self, text: str, context: ExtractionContext) -> list[RecordT]:
        items = self._find_array(text)
        if items is None:
            return []

        try:
            payloads = self.payload_adapter.validate_python(items)
        except ValidationError as e:
            logger.debug(f"JSON '{self.array_field}' array has an unexpected shape: {e.error_count()} error(s)")
            return []

        return [
            record
            for record in (self._to_record(payload, context) for payload in payloads)
            if record is not None
        ]

    def _find_array(self, text: str) -> Optional[list[Any]]:
        for match in _JSON_BLOCK_RE.finditer(text):
            try:
                data = json.loads(match.group("body"))
            except json.JSONDecodeError as e:
                logger.debug(f"Skipping unparsable JSON block: {e}")
                continue
            if isinstance(data, dict) and isinstance(data.get(self.array_field), list):
                return data[self.array_field]
        return None

    @abstractmethod
    def _to_record(self, payload: Any, context: ExtractionContext) -> Optional[RecordT]:
        ...


class StoryJsonStrategy(EmbeddedJsonStrategy[UserStory]):
    array_field = "stories"
    payload_adapter = TypeAdapter(list[_StoryPayload])

    def _to_record(self, payload: _StoryPayload, context: ExtractionContext) -> Optional[UserStory]:
        statement = payload.story.strip()
        if not statement:
            return None
        return UserStory(
            # Caller-supplied title, never the one echoed in the payload
            epic_title=context.epic_title,
            statement=statement,
            acceptance_criteria=[
                AcceptanceCriterion(given=c.given.strip(), when=c.when.strip(), then=c.then.strip())
                for c in payload.acceptance_criteria
            ],
            kpis=(payload.kpis or "").strip(),
            design_link=(payload.design_link or "").strip(),
        )


class EpicJsonStrategy(EmbeddedJsonStrategy[Epic]):
    array_field = "epics"
    payload_adapter = TypeAdapter(list[_EpicPayload])

    def _to_record(self, payload: _EpicPayload, context: ExtractionContext) -> Optional[Epic]:
        title = payload.title.strip()
        if not title:
            return None
        return Epic(
            title=title,
            objective=(payload.objective or "").strip(),
            problem_addressed=(payload.problem_addressed or "").strip(),
            business_value=(payload.business_value or "").strip(),
        )


# =============================================================================
# Structured sections
# =============================================================================


def _sections(text: str, marker_re: re.Pattern[str]) -> list[tuple[re.Match[str], str]]:
    """Split text at each marker; each section starts at its own marker."""
    markers = list(marker_re.finditer(text))
    sections = []
    for i, marker in enumerate(markers):
        end = markers[i + 1].start() if i + 1 < len(markers) else len(text)
        sections.append((marker, text[marker.start():end]))
    return sections


class StorySectionsStrategy(ExtractionStrategy[UserStory]):
    """One ``User Story N`` section per story, with labeled fields."""

    name = "structured-sections"

    def extract(self, text: str, context: ExtractionContext) -> list[UserStory]:
        stories = []
        for _, section in _sections(text, STORY_MARKER_RE):
            narrative = NARRATIVE_RE.search(strip_emphasis(section))
            if not narrative:
                logger.debug("Story section without a narrative sentence, skipped")
                continue

            stories.append(UserStory(
                epic_title=context.epic_title,
                statement=sentence_of(narrative),
                acceptance_criteria=extract_criteria(section),
                kpis=extract_field_any(section, *KPI_LABELS),
                design_link=extract_field_any(section, *DESIGN_LINK_LABELS),
            ))
        return stories


class EpicSectionsStrategy(ExtractionStrategy[Epic]):
    """One ``### EPIC`` section per epic, with labeled fields."""

    name = "structured-sections"

    def extract(self, text: str, context: ExtractionContext) -> list[Epic]:
        epics = []
        for marker, section in _sections(text, EPIC_MARKER_RE):
            title = (
                extract_field_any(section, *TITLE_LABELS)
                or title_from_heading(marker.group("heading"))
            )
            if not title:
                logger.debug("Epic section without a title, skipped")
                continue

            epics.append(Epic(
                title=title,
                objective=extract_field_any(section, *OBJECTIVE_LABELS),
                problem_addressed=extract_field_any(section, *PROBLEM_LABELS),
                business_value=extract_field_any(section, *BUSINESS_VALUE_LABELS),
            ))
        return epics


# =============================================================================
# Numbered list / bare sentence
# =============================================================================


class StoryNumberedListStrategy(ExtractionStrategy[UserStory]):
    """``1. En tant que ..., je veux ..., afin de ...`` items.

    Only the statement is available in this format.
    """

    name = "numbered-list"

    def extract(self, text: str, context: ExtractionContext) -> list[UserStory]:
        return [
            UserStory(epic_title=context.epic_title, statement=sentence_of(match, "sentence"))
            for match in NUMBERED_NARRATIVE_RE.finditer(strip_emphasis(text))
        ]


class EpicNumberedListStrategy(ExtractionStrategy[Epic]):
    """``1. EPIC : <title>`` items; only the title is available."""

    name = "numbered-list"

    def extract(self, text: str, context: ExtractionContext) -> list[Epic]:
        epics = []
        for match in NUMBERED_EPIC_RE.finditer(text):
            title = strip_emphasis(match.group("title")).strip().strip("*").strip()
            if title:
                epics.append(Epic(title=title))
        return epics


class BareSentenceStrategy(ExtractionStrategy[UserStory]):
    """Every narrative sentence anywhere in the text, no section boundaries."""

    name = "bare-sentence"

    def extract(self, text: str, context: ExtractionContext) -> list[UserStory]:
        return [
            UserStory(epic_title=context.epic_title, statement=sentence_of(match))
            for match in NARRATIVE_RE.finditer(strip_emphasis(text))
        ]
