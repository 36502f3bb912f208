"""Persistence for generated project content."""

from .base import ProjectStore
from .json_store import JsonFileProjectStore

__all__ = ["ProjectStore", "JsonFileProjectStore"]
