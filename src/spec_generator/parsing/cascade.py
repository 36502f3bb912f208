"""Ordered fallback over extraction strategies.

The first strategy that yields at least one record wins; later strategies are
not tried and results are never merged. Zero records from every strategy is a
successful, empty extraction.
"""

from __future__ import annotations

from typing import Generic, Optional, Sequence

from ..models.project import Epic, UserStory
from ..utils.logger import get_logger
from .strategies import (
    BareSentenceStrategy,
    EpicJsonStrategy,
    EpicNumberedListStrategy,
    EpicSectionsStrategy,
    ExtractionContext,
    ExtractionStrategy,
    RecordT,
    StoryJsonStrategy,
    StoryNumberedListStrategy,
    StorySectionsStrategy,
)

logger = get_logger(__name__)


class ExtractionCascade(Generic[RecordT]):
    """Runs strategies in fixed priority order."""

    def __init__(self, strategies: Sequence[ExtractionStrategy[RecordT]], kind: str):
        self.strategies = tuple(strategies)
        self.kind = kind

    def extract(self, raw_text: str, context: Optional[ExtractionContext] = None) -> list[RecordT]:
        """Extract records from one response body.

        Args:
            raw_text: Text returned by the generation service.
            context: Identifiers that override anything echoed in the text.

        Returns:
            Records from the first strategy that found any, else an empty list.
        """
        context = context or ExtractionContext()
        if not raw_text or not raw_text.strip():
            logger.warning(f"Empty {self.kind} response, nothing to extract")
            return []

        for strategy in self.strategies:
            records = strategy.extract(raw_text, context)
            if records:
                logger.info(f"Extracted {len(records)} {self.kind} with the {strategy.name} strategy")
                return records
            logger.debug(f"{strategy.name} strategy found no {self.kind}")

        logger.warning(f"No {self.kind} recognized in a {len(raw_text)}-char response")
        return []


def story_cascade() -> ExtractionCascade[UserStory]:
    """JSON, then User Story sections, then numbered list, then bare sentences."""
    return ExtractionCascade(
        [
            StoryJsonStrategy(),
            StorySectionsStrategy(),
            StoryNumberedListStrategy(),
            BareSentenceStrategy(),
        ],
        kind="stories",
    )


def epic_cascade() -> ExtractionCascade[Epic]:
    """JSON, then EPIC sections, then numbered list."""
    return ExtractionCascade(
        [
            EpicJsonStrategy(),
            EpicSectionsStrategy(),
            EpicNumberedListStrategy(),
        ],
        kind="epics",
    )


def extract_stories(raw_text: str, epic_title: str = "", project_title: str = "") -> list[UserStory]:
    return story_cascade().extract(
        raw_text, ExtractionContext(project_title=project_title, epic_title=epic_title)
    )


def extract_epics(raw_text: str, project_title: str = "") -> list[Epic]:
    return epic_cascade().extract(raw_text, ExtractionContext(project_title=project_title))
