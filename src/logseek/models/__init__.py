"""Data models for Logseek."""

from logseek.models.page import Page
from logseek.models.search import BlockReference, BlockSearchResult, TaskSearchResult

__all__ = ["Page", "BlockReference", "BlockSearchResult", "TaskSearchResult"]
