"""Generation job models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class JobKind(str, Enum):
    """Which pre-registered template a job runs against."""
    EPICS = "epics"
    STORIES = "stories"


class JobStatus(str, Enum):
    """Status of a generation job as seen by the poller."""
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({
    JobStatus.COMPLETED,
    JobStatus.FAILED,
    JobStatus.EXPIRED,
    JobStatus.TIMED_OUT,
})


@dataclass
class GenerationJob:
    """Handle on one submitted job.

    Created by JobOrchestrator, mutated only by StatusPoller, and dropped
    once it reaches a terminal status.
    """

    session_id: str
    job_id: str
    kind: JobKind
    status: JobStatus = JobStatus.QUEUED
    attempts: int = 0
    last_error: Optional[str] = None

    def describe(self) -> dict[str, str]:
        """Identifiers used in logs and error details."""
        return {
            "kind": self.kind.value,
            "session_id": self.session_id,
            "job_id": self.job_id,
        }


@dataclass(frozen=True)
class JobStatusReport:
    """One status reading returned by the generation service."""

    status: JobStatus
    error_reason: Optional[str] = None


@dataclass(frozen=True)
class SessionMessage:
    """A message in a generation session."""

    author: str
    text: str
