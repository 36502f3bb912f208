"""Job submission: session, prompt, job start."""

from __future__ import annotations

from ..config.settings import TemplateConfig
from ..models.job import GenerationJob, JobKind
from ..services.assistant_client import AssistantClient
from ..utils.logger import get_logger

logger = get_logger(__name__)


class JobOrchestrator:
    """Submits one prompt as a generation job.

    No retries here: any rejection during submission is fatal to the call.
    """

    def __init__(self, client: AssistantClient, templates: TemplateConfig):
        self.client = client
        self.templates = templates

    async def submit(self, prompt: str, kind: JobKind) -> GenerationJob:
        """Open a session, post the prompt and start a job for ``kind``.

        Raises:
            ConfigurationError: If no template is configured for ``kind``.
            ServiceUnavailableError: If the session cannot be opened.
            InvalidRequestError: If the prompt or the job start is rejected.
        """
        template_id = self.templates.template_for(kind)

        session_id = await self.client.create_session()
        logger.info(f"Session {session_id} opened for {kind.value} generation")

        await self.client.post_message(session_id, prompt)

        job_id = await self.client.start_job(session_id, template_id)
        logger.info(f"Job {job_id} started on session {session_id}")

        return GenerationJob(session_id=session_id, job_id=job_id, kind=kind)
