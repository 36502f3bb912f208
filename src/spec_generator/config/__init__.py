"""Configuration module for the specification generator."""

from .settings import (
    AssistantSettings,
    PollingPolicy,
    PollingSettings,
    Settings,
    TemplateConfig,
    get_settings,
)

__all__ = [
    "AssistantSettings",
    "PollingPolicy",
    "PollingSettings",
    "Settings",
    "TemplateConfig",
    "get_settings",
]
