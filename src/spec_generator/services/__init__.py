"""Service clients."""

from .assistant_client import AssistantClient, OpenAIAssistantClient

__all__ = ["AssistantClient", "OpenAIAssistantClient"]
