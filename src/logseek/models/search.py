"""Search result models.

Results serialize to the compact keys used on the wire (p, t, uuid, ex, mc,
ln) via ``to_dict()``.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, Field

from logseq_blocks import LogseqBlock, TaskMarker, TaskPriority


class BlockSearchResult(BaseModel):
    """A block (or whole-file) match for a text query."""

    path: str = Field(
        ...,
        serialization_alias="p",
        description="Graph-relative path of the matching file"
    )

    title: str = Field(
        ...,
        serialization_alias="t",
        description="Page title (file name without extension)"
    )

    block_id: Optional[str] = Field(
        default=None,
        serialization_alias="uuid",
        description="Matching block identifier (None for file-level matches)"
    )

    excerpt: str = Field(
        ...,
        serialization_alias="ex",
        description="Text around the first match, with ... where truncated"
    )

    match_count: int = Field(
        ...,
        ge=0,
        serialization_alias="mc",
        description="Non-overlapping occurrences of the query"
    )

    line: Optional[int] = Field(
        default=None,
        ge=1,
        serialization_alias="ln",
        description="1-based line of the first match (file-level matches only)"
    )

    model_config = {"frozen": True}

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TaskSearchResult(BaseModel):
    """A block carrying a task marker."""

    path: str = Field(..., serialization_alias="p", description="Graph-relative path")
    title: str = Field(..., serialization_alias="t", description="Page title")
    block_id: str = Field(..., serialization_alias="uuid", description="Block identifier")
    content: str = Field(..., description="Block content, marker included")
    marker: TaskMarker = Field(..., description="Canonical task marker")
    priority: Optional[TaskPriority] = Field(default=None, description="Task priority, if any")

    model_config = {"frozen": True}

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass
class BlockReference:
    """A block whose content references another block.

    Attributes:
        path: Graph-relative path of the referencing block's file
        block: The referencing block
    """

    path: str
    block: LogseqBlock

    def to_dict(self, preview_length: int = 100) -> dict[str, Any]:
        return {
            "path": self.path,
            "block": {
                "uuid": self.block.block_id,
                "content": self.block.content[:preview_length],
            },
        }
