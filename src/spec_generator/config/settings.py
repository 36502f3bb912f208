"""
Configuration management using Pydantic Settings.
Loads settings from environment variables and .env files.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.exceptions import ConfigurationError
from ..models.job import JobKind


class AssistantSettings(BaseSettings):
    """Generation service (assistants API) settings."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    api_key: str = Field(default="", description="API key for the generation service")
    base_url: str = Field(default="https://api.openai.com/v1", description="Service base URL")
    beta_header: str = Field(default="assistants=v2", description="Value of the OpenAI-Beta header")
    timeout: int = Field(default=60, description="HTTP request timeout in seconds")

    epics_assistant_id: str = Field(
        default="", description="Template (assistant) tuned to emit epic-shaped text"
    )
    stories_assistant_id: str = Field(
        default="", description="Template (assistant) tuned to emit story-shaped text for one epic"
    )


@dataclass(frozen=True)
class PollingPolicy:
    """Bounds for waiting on one job.

    ``max_attempts`` counts re-polls after the first status reading.
    ``fetch_retries`` counts retries of a single failing status fetch.
    """

    interval: float
    max_attempts: int
    fetch_retries: int = 3
    retry_delay: float = 1.0


class PollingSettings(BaseSettings):
    """Status polling configuration."""

    model_config = SettingsConfigDict(env_prefix="POLLING_")

    epics_interval: float = Field(default=1.0, description="Seconds between epic job status checks")
    epics_max_attempts: int = Field(default=30, ge=0, description="Re-poll budget for epic jobs")
    stories_interval: float = Field(default=2.0, description="Seconds between story job status checks")
    stories_max_attempts: int = Field(default=60, ge=0, description="Re-poll budget for story jobs")
    fetch_retries: int = Field(default=3, ge=0, description="Retries for one failing status fetch")
    retry_delay: float = Field(default=1.0, description="Seconds between status fetch retries")

    def policy_for(self, kind: JobKind) -> PollingPolicy:
        """Build the polling policy for a job kind."""
        if kind == JobKind.EPICS:
            interval, max_attempts = self.epics_interval, self.epics_max_attempts
        else:
            interval, max_attempts = self.stories_interval, self.stories_max_attempts
        return PollingPolicy(
            interval=interval,
            max_attempts=max_attempts,
            fetch_retries=self.fetch_retries,
            retry_delay=self.retry_delay,
        )


class TemplateConfig(BaseModel):
    """Job template identifiers, one per job kind."""

    epics_template_id: Optional[str] = None
    stories_template_id: Optional[str] = None

    @classmethod
    def from_settings(cls, assistant: AssistantSettings) -> "TemplateConfig":
        return cls(
            epics_template_id=assistant.epics_assistant_id or None,
            stories_template_id=assistant.stories_assistant_id or None,
        )

    def template_for(self, kind: JobKind) -> str:
        """Get the template id for a job kind.

        Raises:
            ConfigurationError: If no template is configured for the kind.
        """
        template_id = (
            self.epics_template_id if kind == JobKind.EPICS else self.stories_template_id
        )
        if not template_id:
            raise ConfigurationError(
                f"No template configured for '{kind.value}' jobs",
                details={"kind": kind.value},
            )
        return template_id


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="WARNING", description="Logging level when no -v/-q flag is given")

    assistant: AssistantSettings = Field(default_factory=AssistantSettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @property
    def templates(self) -> TemplateConfig:
        return TemplateConfig.from_settings(self.assistant)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
