"""
Exception hierarchy for the specification generator.

Two families matter to callers:
- GenerationServiceError: the backend rejected or failed a single call.
- GenerationError: the job itself ended badly (failed, expired, timed out,
  or completed without an assistant message).

An empty extraction result is not an error and has no exception here.
"""

from typing import Any, Optional


class SpecGeneratorError(Exception):
    """Base exception for all specification generator errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for reporting."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Configuration / Storage Errors
# =============================================================================


class ConfigurationError(SpecGeneratorError):
    """Error in application configuration."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)


class NotFoundError(SpecGeneratorError):
    """Requested resource not found."""

    def __init__(self, resource_type: str, resource_id: Optional[str] = None) -> None:
        msg = f"{resource_type} not found"
        if resource_id:
            msg = f"{resource_type} with ID '{resource_id}' not found"

        super().__init__(
            message=msg,
            code="NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


# =============================================================================
# Generation Service Errors (a single backend call failed)
# =============================================================================


class GenerationServiceError(SpecGeneratorError):
    """Error communicating with the generation service."""

    def __init__(
        self,
        message: str,
        code: str = "GENERATION_SERVICE_ERROR",
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        merged = dict(details or {})
        if status_code is not None:
            merged["status_code"] = status_code
        super().__init__(message=message, code=code, details=merged)
        self.status_code = status_code


class ServiceUnavailableError(GenerationServiceError):
    """The service refused to open a session (or could not be reached)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code="SERVICE_UNAVAILABLE",
            status_code=status_code,
            details=details,
        )


class InvalidRequestError(GenerationServiceError):
    """The service rejected a prompt post or a job start."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code="INVALID_REQUEST",
            status_code=status_code,
            details=details,
        )


class TransientServiceError(GenerationServiceError):
    """A status fetch failed at the transport or server level. Retryable."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code="TRANSIENT_SERVICE_ERROR",
            status_code=status_code,
            details=details,
        )


# =============================================================================
# Generation Errors (the job ended without usable output)
# =============================================================================


class GenerationError(SpecGeneratorError):
    """A generation job did not produce output."""

    default_message = "generation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        code: str = "GENERATION_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message or self.default_message, code=code, details=details)


class GenerationFailedError(GenerationError):
    """The backend reported the job as failed."""

    def __init__(self, reason: Optional[str] = None, details: Optional[dict[str, Any]] = None) -> None:
        self.reason = reason
        message = f"generation failed: {reason}" if reason else None
        super().__init__(message=message, code="GENERATION_FAILED", details=details)


class GenerationExpiredError(GenerationError):
    """The backend reported the job as expired before completion."""

    default_message = "generation expired before completion"

    def __init__(self, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(code="GENERATION_EXPIRED", details=details)


class GenerationTimeoutError(GenerationError, TimeoutError):
    """The local polling budget ran out while the job was still running.

    The backend job is not cancelled and may keep running.
    """

    def __init__(self, attempts: int, details: Optional[dict[str, Any]] = None) -> None:
        self.attempts = attempts
        super().__init__(
            message=f"generation timed out after {attempts} polling attempts",
            code="GENERATION_TIMEOUT",
            details={"attempts": attempts, **(details or {})},
        )


class NoResponseError(GenerationError):
    """The job completed but the session holds no assistant message."""

    default_message = "job completed without an assistant response"

    def __init__(self, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(code="NO_RESPONSE", details=details)
