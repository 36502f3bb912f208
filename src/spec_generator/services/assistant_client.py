"""Clients for the conversational generation service.

The service is session based: a session holds the prompt and the generated
messages, and a job runs one pre-registered template against the session.
``OpenAIAssistantClient`` maps this onto the Assistants API
(session = thread, job = run).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from ..config.settings import AssistantSettings
from ..core.exceptions import (
    ConfigurationError,
    GenerationServiceError,
    InvalidRequestError,
    ServiceUnavailableError,
    TransientServiceError,
)
from ..models.job import JobStatus, JobStatusReport, SessionMessage
from ..utils.logger import get_logger

logger = get_logger(__name__)


# Run statuses reported by the service, normalized to the poller's view
RUN_STATUS_MAP: dict[str, JobStatus] = {
    "queued": JobStatus.QUEUED,
    "in_progress": JobStatus.IN_PROGRESS,
    "requires_action": JobStatus.IN_PROGRESS,
    "cancelling": JobStatus.IN_PROGRESS,
    "completed": JobStatus.COMPLETED,
    "failed": JobStatus.FAILED,
    "cancelled": JobStatus.FAILED,
    "incomplete": JobStatus.FAILED,
    "expired": JobStatus.EXPIRED,
}

# HTTP statuses worth retrying on a status fetch
TRANSIENT_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})


class AssistantClient(ABC):
    """Abstract conversational generation service."""

    @abstractmethod
    async def create_session(self) -> str:
        """Open a session and return its id.

        Raises:
            ServiceUnavailableError: If the service refuses the session.
        """
        pass

    @abstractmethod
    async def post_message(self, session_id: str, text: str) -> None:
        """Post a user message to the session.

        Raises:
            InvalidRequestError: If the message is rejected.
        """
        pass

    @abstractmethod
    async def start_job(self, session_id: str, template_id: str) -> str:
        """Start a job bound to a template and return the job id.

        Raises:
            InvalidRequestError: If the job is rejected.
        """
        pass

    @abstractmethod
    async def get_job_status(self, session_id: str, job_id: str) -> JobStatusReport:
        """Read the job status once.

        Raises:
            TransientServiceError: On transport or server-side failures.
        """
        pass

    @abstractmethod
    async def fetch_messages(self, session_id: str) -> list[SessionMessage]:
        """List the session messages in service order."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None

    async def __aenter__(self) -> "AssistantClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class OpenAIAssistantClient(AssistantClient):
    """Assistants API (v2) client using httpx."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        beta_header: str = "assistants=v2",
        timeout: int = 60,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            api_key: Bearer token for the service.
            base_url: Service root, e.g. ``https://api.openai.com/v1``.
            beta_header: Value sent in the ``OpenAI-Beta`` header.
            timeout: HTTP request timeout in seconds.
            http_client: Pre-built client (tests inject one with a mock transport).
        """
        if not api_key:
            raise ConfigurationError("Generation service API key is not configured (OPENAI_API_KEY)")

        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.beta_header = beta_header
        self.timeout = timeout
        self._client = http_client

    @classmethod
    def from_settings(cls, settings: AssistantSettings) -> "OpenAIAssistantClient":
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            beta_header=settings.beta_header,
            timeout=settings.timeout,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "OpenAI-Beta": self.beta_header,
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, json_body: Optional[dict[str, Any]] = None) -> httpx.Response:
        client = await self._get_client()
        return await client.request(method, path, json=json_body, headers=self._headers())

    # ------------------------------------------------------------------
    # Submission calls (never retried)
    # ------------------------------------------------------------------

    async def create_session(self) -> str:
        try:
            response = await self._request("POST", "/threads")
        except httpx.TransportError as e:
            raise ServiceUnavailableError(f"Could not reach generation service: {e}") from e

        if response.is_error:
            raise ServiceUnavailableError(
                f"Session creation rejected ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        session_id = response.json()["id"]
        logger.debug(f"Session created: {session_id}")
        return session_id

    async def post_message(self, session_id: str, text: str) -> None:
        try:
            response = await self._request(
                "POST",
                f"/threads/{session_id}/messages",
                {"role": "user", "content": text},
            )
        except httpx.TransportError as e:
            raise ServiceUnavailableError(f"Could not reach generation service: {e}") from e

        if response.is_error:
            raise InvalidRequestError(
                f"Message rejected ({response.status_code}): {response.text}",
                status_code=response.status_code,
                details={"session_id": session_id},
            )

    async def start_job(self, session_id: str, template_id: str) -> str:
        try:
            response = await self._request(
                "POST",
                f"/threads/{session_id}/runs",
                {"assistant_id": template_id},
            )
        except httpx.TransportError as e:
            raise ServiceUnavailableError(f"Could not reach generation service: {e}") from e

        if response.is_error:
            raise InvalidRequestError(
                f"Job start rejected ({response.status_code}): {response.text}",
                status_code=response.status_code,
                details={"session_id": session_id, "template_id": template_id},
            )

        job_id = response.json()["id"]
        logger.debug(f"Job started: {job_id} (template {template_id})")
        return job_id

    # ------------------------------------------------------------------
    # Polling / retrieval
    # ------------------------------------------------------------------

    async def get_job_status(self, session_id: str, job_id: str) -> JobStatusReport:
        details = {"session_id": session_id, "job_id": job_id}
        try:
            response = await self._request("GET", f"/threads/{session_id}/runs/{job_id}")
        except httpx.TransportError as e:
            raise TransientServiceError(f"Status fetch failed: {e}", details=details) from e

        if response.status_code in TRANSIENT_STATUS_CODES:
            raise TransientServiceError(
                f"Status fetch failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                details=details,
            )
        if response.is_error:
            raise InvalidRequestError(
                f"Status fetch rejected ({response.status_code}): {response.text}",
                status_code=response.status_code,
                details=details,
            )

        return parse_run_status(response.json())

    async def fetch_messages(self, session_id: str) -> list[SessionMessage]:
        try:
            response = await self._request("GET", f"/threads/{session_id}/messages")
        except httpx.TransportError as e:
            raise GenerationServiceError(f"Message retrieval failed: {e}") from e

        if response.is_error:
            raise GenerationServiceError(
                f"Message retrieval failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                details={"session_id": session_id},
            )

        return [parse_message(item) for item in response.json().get("data", [])]


def parse_run_status(data: dict[str, Any]) -> JobStatusReport:
    """Normalize a run payload into a JobStatusReport."""
    raw_status = str(data.get("status", ""))
    status = RUN_STATUS_MAP.get(raw_status, JobStatus.IN_PROGRESS)

    reason = None
    if status == JobStatus.FAILED:
        last_error = data.get("last_error") or {}
        incomplete = data.get("incomplete_details") or {}
        reason = last_error.get("message") or incomplete.get("reason")
        if not reason and raw_status != "failed":
            reason = f"run {raw_status}"

    return JobStatusReport(status=status, error_reason=reason)


def parse_message(data: dict[str, Any]) -> SessionMessage:
    """Flatten a message payload into author + text."""
    parts = []
    for block in data.get("content") or []:
        if block.get("type", "text") == "text":
            text = block.get("text")
            if isinstance(text, dict):
                parts.append(str(text.get("value", "")))
            elif text is not None:
                parts.append(str(text))
    return SessionMessage(author=str(data.get("role", "")), text="\n".join(parts))
