"""
Tests for job status polling.
"""

import pytest
from unittest.mock import AsyncMock, call

from spec_generator.config.settings import PollingPolicy
from spec_generator.core.exceptions import (
    GenerationExpiredError,
    GenerationFailedError,
    GenerationTimeoutError,
    TransientServiceError,
)
from spec_generator.core.poller import StatusPoller
from spec_generator.models.job import GenerationJob, JobKind, JobStatus, JobStatusReport

QUEUED = JobStatusReport(JobStatus.QUEUED)
IN_PROGRESS = JobStatusReport(JobStatus.IN_PROGRESS)
COMPLETED = JobStatusReport(JobStatus.COMPLETED)


def make_job() -> GenerationJob:
    return GenerationJob(session_id="thread_1", job_id="run_1", kind=JobKind.STORIES)


class TestStatusPoller:
    """Tests for StatusPoller."""

    @pytest.fixture
    def poller(self, mock_client: AsyncMock, fast_policy: PollingPolicy, no_sleep: AsyncMock) -> StatusPoller:
        """Create a poller with a budget of 3 re-polls and no real sleeping."""
        return StatusPoller(mock_client, fast_policy, sleep=no_sleep)

    @pytest.mark.asyncio
    async def test_queued_then_completed(self, poller: StatusPoller, mock_client: AsyncMock, no_sleep: AsyncMock):
        """Test queued, in_progress, in_progress, completed."""
        mock_client.get_job_status.side_effect = [QUEUED, IN_PROGRESS, IN_PROGRESS, COMPLETED]

        job = await poller.wait_for_completion(make_job())

        assert job.status == JobStatus.COMPLETED
        assert job.attempts == 3
        assert mock_client.get_job_status.await_count == 4
        assert no_sleep.await_args_list == [call(0.5)] * 3

    @pytest.mark.asyncio
    async def test_completes_on_last_allowed_attempt(self, poller: StatusPoller, mock_client: AsyncMock):
        """Test a job that completes exactly when the budget is used up."""
        mock_client.get_job_status.side_effect = [IN_PROGRESS] * 3 + [COMPLETED]

        job = await poller.wait_for_completion(make_job())

        assert job.status == JobStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_timeout_one_cycle_over_budget(self, poller: StatusPoller, mock_client: AsyncMock):
        """Test a job still in progress one cycle past the budget."""
        mock_client.get_job_status.side_effect = [IN_PROGRESS] * 4 + [COMPLETED]
        job = make_job()

        with pytest.raises(GenerationTimeoutError) as exc_info:
            await poller.wait_for_completion(job)

        assert exc_info.value.attempts == 3
        assert job.status == JobStatus.TIMED_OUT
        assert mock_client.get_job_status.await_count == 4

    @pytest.mark.asyncio
    async def test_zero_budget_times_out_after_first_reading(self, mock_client: AsyncMock, no_sleep: AsyncMock):
        """Test that a zero budget allows a single status reading."""
        mock_client.get_job_status.side_effect = [QUEUED, COMPLETED]
        poller = StatusPoller(mock_client, PollingPolicy(interval=1.0, max_attempts=0), sleep=no_sleep)

        with pytest.raises(GenerationTimeoutError):
            await poller.wait_for_completion(make_job())

        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeout_caught_as_builtin_timeout(self, poller: StatusPoller, mock_client: AsyncMock):
        """Test that the budget timeout is also a TimeoutError."""
        mock_client.get_job_status.side_effect = [IN_PROGRESS] * 4

        with pytest.raises(TimeoutError):
            await poller.wait_for_completion(make_job())

    @pytest.mark.asyncio
    async def test_reported_timed_out_stops_polling(
        self, poller: StatusPoller, mock_client: AsyncMock, no_sleep: AsyncMock
    ):
        """Test that a timed_out status from the service ends polling at once."""
        mock_client.get_job_status.side_effect = [IN_PROGRESS, JobStatusReport(JobStatus.TIMED_OUT), COMPLETED]
        job = make_job()

        with pytest.raises(GenerationTimeoutError):
            await poller.wait_for_completion(job)

        assert job.status == JobStatus.TIMED_OUT
        assert mock_client.get_job_status.await_count == 2
        assert no_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_transient_errors_retried_then_success(
        self, poller: StatusPoller, mock_client: AsyncMock, no_sleep: AsyncMock
    ):
        """Test a fetch that fails twice then succeeds."""
        mock_client.get_job_status.side_effect = [
            TransientServiceError("503", status_code=503),
            TransientServiceError("503", status_code=503),
            COMPLETED,
        ]

        job = await poller.wait_for_completion(make_job())

        assert job.status == JobStatus.COMPLETED
        assert job.attempts == 0
        assert no_sleep.await_args_list == [call(1.0), call(1.0)]

    @pytest.mark.asyncio
    async def test_transient_errors_exhaust_retries(self, poller: StatusPoller, mock_client: AsyncMock):
        """Test a fetch failing on the first try and on all 3 retries."""
        mock_client.get_job_status.side_effect = [
            TransientServiceError("502", status_code=502) for _ in range(4)
        ] + [COMPLETED]

        with pytest.raises(TransientServiceError):
            await poller.wait_for_completion(make_job())

        assert mock_client.get_job_status.await_count == 4

    @pytest.mark.asyncio
    async def test_retries_do_not_consume_attempts(self, mock_client: AsyncMock, no_sleep: AsyncMock):
        """Test that fetch retries and re-polls use separate budgets."""
        mock_client.get_job_status.side_effect = [
            IN_PROGRESS,
            TransientServiceError("timeout"),
            TransientServiceError("timeout"),
            IN_PROGRESS,
            TransientServiceError("timeout"),
            COMPLETED,
        ]
        policy = PollingPolicy(interval=2.0, max_attempts=2, fetch_retries=2, retry_delay=1.0)
        poller = StatusPoller(mock_client, policy, sleep=no_sleep)

        job = await poller.wait_for_completion(make_job())

        assert job.status == JobStatus.COMPLETED
        assert job.attempts == 2

    @pytest.mark.asyncio
    async def test_failed_job(self, poller: StatusPoller, mock_client: AsyncMock):
        """Test that a failed job raises with the reported reason."""
        mock_client.get_job_status.side_effect = [
            IN_PROGRESS,
            JobStatusReport(JobStatus.FAILED, "Rate limit reached"),
        ]
        job = make_job()

        with pytest.raises(GenerationFailedError) as exc_info:
            await poller.wait_for_completion(job)

        assert exc_info.value.reason == "Rate limit reached"
        assert "Rate limit reached" in exc_info.value.message
        assert exc_info.value.details["job_id"] == "run_1"
        assert job.last_error == "Rate limit reached"

    @pytest.mark.asyncio
    async def test_failed_job_without_reason(self, poller: StatusPoller, mock_client: AsyncMock):
        """Test the generic message when no reason is reported."""
        mock_client.get_job_status.side_effect = [JobStatusReport(JobStatus.FAILED)]

        with pytest.raises(GenerationFailedError) as exc_info:
            await poller.wait_for_completion(make_job())

        assert exc_info.value.message == "generation failed"

    @pytest.mark.asyncio
    async def test_expired_job(self, poller: StatusPoller, mock_client: AsyncMock):
        """Test that an expired job raises."""
        mock_client.get_job_status.side_effect = [QUEUED, JobStatusReport(JobStatus.EXPIRED)]

        with pytest.raises(GenerationExpiredError):
            await poller.wait_for_completion(make_job())
