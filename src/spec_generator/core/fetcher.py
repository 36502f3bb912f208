"""Retrieval of a completed job's output."""

from __future__ import annotations

from ..models.job import GenerationJob
from ..services.assistant_client import AssistantClient
from ..utils.logger import get_logger
from .exceptions import NoResponseError

logger = get_logger(__name__)

ASSISTANT_AUTHOR = "assistant"


class ResponseFetcher:
    """Returns the first assistant-authored message of a job's session."""

    def __init__(self, client: AssistantClient):
        self.client = client

    async def fetch_output(self, job: GenerationJob) -> str:
        """Fetch the generated text.

        Raises:
            NoResponseError: If the session holds no assistant message.
        """
        messages = await self.client.fetch_messages(job.session_id)
        for message in messages:
            if message.author == ASSISTANT_AUTHOR:
                logger.debug(f"Assistant response retrieved ({len(message.text)} chars)")
                return message.text

        logger.error(f"No assistant message in session {job.session_id}")
        raise NoResponseError(details=job.describe())
