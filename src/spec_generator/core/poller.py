"""Job status polling.

Two independent budgets:
- a single status fetch that fails at the transport/server level is retried
  ``fetch_retries`` times, ``retry_delay`` seconds apart;
- a job that is still queued or in progress is re-polled every ``interval``
  seconds, at most ``max_attempts`` times.

A flaky fetch never consumes the in-progress budget, and a slow job never
consumes fetch retries.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from ..config.settings import PollingPolicy
from ..models.job import GenerationJob, JobStatus, JobStatusReport
from ..services.assistant_client import AssistantClient
from ..utils.logger import get_logger
from .exceptions import (
    GenerationExpiredError,
    GenerationFailedError,
    GenerationTimeoutError,
    TransientServiceError,
)

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class StatusPoller:
    """Waits for a job to reach a terminal status."""

    def __init__(
        self,
        client: AssistantClient,
        policy: PollingPolicy,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.policy = policy
        self._sleep = sleep

    async def wait_for_completion(self, job: GenerationJob) -> GenerationJob:
        """Poll until the job completes.

        Returns:
            The job, with status ``completed``.

        Raises:
            GenerationFailedError: The backend reported the job failed.
            GenerationExpiredError: The backend reported the job expired.
            GenerationTimeoutError: The re-poll budget ran out.
            TransientServiceError: A status fetch kept failing.
        """
        while True:
            report = await self._fetch_status(job)
            job.status = report.status

            if report.status.is_terminal:
                return self._settle(job, report)

            if job.attempts >= self.policy.max_attempts:
                job.status = JobStatus.TIMED_OUT
                logger.error(
                    f"Job {job.job_id} still {report.status.value} after "
                    f"{job.attempts} attempts ({job.attempts * self.policy.interval:.0f}s), giving up"
                )
                raise GenerationTimeoutError(job.attempts, details=job.describe())

            job.attempts += 1
            logger.debug(
                f"Attempt {job.attempts}/{self.policy.max_attempts} - status: {report.status.value}"
            )
            await self._sleep(self.policy.interval)

    def _settle(self, job: GenerationJob, report: JobStatusReport) -> GenerationJob:
        """Return a completed job, raise for any other terminal status."""
        if report.status == JobStatus.COMPLETED:
            logger.info(f"Job {job.job_id} completed after {job.attempts} polling attempts")
            return job

        if report.status == JobStatus.FAILED:
            job.last_error = report.error_reason
            logger.error(f"Job {job.job_id} failed: {report.error_reason or 'unknown reason'}")
            raise GenerationFailedError(report.error_reason, details=job.describe())

        if report.status == JobStatus.EXPIRED:
            logger.error(f"Job {job.job_id} expired")
            raise GenerationExpiredError(details=job.describe())

        logger.error(f"Job {job.job_id} reported {report.status.value} by the service")
        raise GenerationTimeoutError(job.attempts, details=job.describe())

    async def _fetch_status(self, job: GenerationJob) -> JobStatusReport:
        """Read the status once, retrying transient failures."""

        def log_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception()
            job.last_error = str(error)
            logger.warning(
                f"Status fetch failed, retry {retry_state.attempt_number}/{self.policy.fetch_retries} "
                f"in {self.policy.retry_delay}s: {error}"
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.fetch_retries + 1),
            wait=wait_fixed(self.policy.retry_delay),
            retry=retry_if_exception_type(TransientServiceError),
            before_sleep=log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        try:
            return await retrying(self.client.get_job_status, job.session_id, job.job_id)
        except TransientServiceError as e:
            job.last_error = e.message
            logger.error(f"Status fetch for job {job.job_id} failed after {self.policy.fetch_retries} retries")
            raise
