"""
Generation service: the composition root of the pipeline.

One pipeline run is submit -> poll -> fetch -> extract. Project generation runs
it once for the epics, then once per epic for that epic's stories, with the
per-epic runs executing concurrently.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from ..config.settings import PollingSettings, Settings, TemplateConfig
from ..models.job import JobKind
from ..models.project import Epic, ProjectContent, UserStory
from ..parsing.cascade import epic_cascade, story_cascade
from ..parsing.strategies import ExtractionContext
from ..services.assistant_client import AssistantClient, OpenAIAssistantClient
from ..utils.diagnostics import DiagnosticsSink, NullDiagnosticsSink
from ..utils.logger import get_logger, log_operation
from .exceptions import SpecGeneratorError
from .fetcher import ResponseFetcher
from .orchestrator import JobOrchestrator
from .poller import Sleep, StatusPoller
from .prompts import build_epics_prompt, build_stories_prompt

logger = get_logger(__name__)


class GenerationService:
    """Generates epics and user stories for a project."""

    def __init__(
        self,
        client: AssistantClient,
        templates: TemplateConfig,
        polling: Optional[PollingSettings] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize the service.

        Args:
            client: Generation service client, shared by all pipeline runs.
            templates: Template id per job kind.
            polling: Polling budgets; defaults are read from the environment.
            diagnostics: Receives every raw response before extraction.
            sleep: Awaitable sleep used by the pollers.
        """
        self.client = client
        self.polling = polling or PollingSettings()
        self.diagnostics = diagnostics or NullDiagnosticsSink()
        self._sleep = sleep

        self.orchestrator = JobOrchestrator(client, templates)
        self.fetcher = ResponseFetcher(client)
        self.epic_cascade = epic_cascade()
        self.story_cascade = story_cascade()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        diagnostics: Optional[DiagnosticsSink] = None,
    ) -> "GenerationService":
        return cls(
            client=OpenAIAssistantClient.from_settings(settings.assistant),
            templates=settings.templates,
            polling=settings.polling,
            diagnostics=diagnostics,
        )

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "GenerationService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _run(self, prompt: str, kind: JobKind, label: str) -> str:
        """Run one job to completion and return its raw output text."""
        job = await self.orchestrator.submit(prompt, kind)

        poller = StatusPoller(self.client, self.polling.policy_for(kind), sleep=self._sleep)
        await poller.wait_for_completion(job)

        raw_text = await self.fetcher.fetch_output(job)
        self.diagnostics.record(kind.value, label, raw_text)
        return raw_text

    async def generate_epics(self, project_title: str, project_description: str) -> list[Epic]:
        """Derive the project's epics. An empty list is a valid outcome."""
        with log_operation(logger, "Generating epics", f"project: {project_title}"):
            raw_text = await self._run(
                build_epics_prompt(project_title, project_description),
                JobKind.EPICS,
                project_title,
            )
            return self.epic_cascade.extract(raw_text, ExtractionContext(project_title=project_title))

    async def generate_stories(self, epic: Epic, project_title: str) -> list[UserStory]:
        """Derive the stories of one epic; each story carries the epic's title."""
        with log_operation(logger, "Generating stories", f"epic: {epic.title}"):
            try:
                raw_text = await self._run(
                    build_stories_prompt(project_title, epic.title, epic.objective),
                    JobKind.STORIES,
                    epic.title,
                )
            except SpecGeneratorError as e:
                e.details.setdefault("epic", epic.title)
                raise
            return self.story_cascade.extract(
                raw_text,
                ExtractionContext(project_title=project_title, epic_title=epic.title),
            )

    async def generate_stories_for_epics(
        self,
        epics: Sequence[Epic],
        project_title: str,
    ) -> list[list[UserStory]]:
        """Run one stories pipeline per epic, concurrently.

        Every pipeline runs to its own end before anything is reported. If any
        of them failed, the first failure in epic order is raised and all
        results are dropped.

        Returns:
            One story list per epic, in epic order.
        """
        results = await asyncio.gather(
            *(self.generate_stories(epic, project_title) for epic in epics),
            return_exceptions=True,
        )

        failures = [
            (epic, result)
            for epic, result in zip(epics, results)
            if isinstance(result, BaseException)
        ]
        if failures:
            for epic, error in failures:
                logger.error(f"Story generation failed for epic '{epic.title}': {error}")
            logger.error(f"{len(failures)}/{len(epics)} story pipelines failed")
            raise failures[0][1]

        return list(results)

    async def generate_project(
        self,
        project_title: str,
        project_description: str,
        epics_only: bool = False,
    ) -> ProjectContent:
        """Generate the epics of a project and, unless ``epics_only``, their stories."""
        with log_operation(logger, "Generating project", project_title):
            epics = await self.generate_epics(project_title, project_description)
            if not epics:
                logger.warning(f"No epics generated for project '{project_title}'")
                return ProjectContent(epics=[])

            if not epics_only:
                story_lists = await self.generate_stories_for_epics(epics, project_title)
                for epic, stories in zip(epics, story_lists):
                    epic.stories = stories

            content = ProjectContent(epics=epics)
            logger.info(f"Project '{project_title}': {len(content.epics)} epics, {content.story_count} stories")
            return content
