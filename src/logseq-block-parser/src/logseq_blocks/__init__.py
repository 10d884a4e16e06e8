"""Logseq block parser - Parse and manipulate Logseq block trees.

This package provides tools for parsing Logseq's block-based markdown format
into a tree of blocks and serializing it back to markdown.

Key features:
- Parse Logseq markdown into LogseqBlock trees with stable UUID identifiers
- Typed block properties (strings, numbers, booleans) in source order
- Task marker and priority recognition (TODO, DOING, DONE, ...)
- Block reference extraction and resolution (((uuid)) tokens)
- Corpus-wide identifier index and graph path operations

Example:
    >>> from logseq_blocks import parse_blocks, serialize_blocks
    >>> blocks = parse_blocks("- My bullet\\n\\t- Child bullet")
    >>> blocks[0].children[0].content
    'Child bullet'
    >>> markdown = serialize_blocks(blocks)
"""

from logseq_blocks.parser import (
    LogseqBlock,
    TaskMarker,
    TaskPriority,
    OPEN_MARKERS,
    CLOSED_MARKERS,
    parse_blocks,
    serialize_blocks,
    flatten_blocks,
    find_block_by_id,
    new_block,
    parse_task,
)
from logseq_blocks.refs import (
    extract_block_refs,
    has_block_refs,
    resolve_block_refs,
    resolve_block_refs_async,
    create_block_ref,
)
from logseq_blocks.index import BlockIndex, BlockLocation
from logseq_blocks.graph import GraphPaths, page_title
from logseq_blocks.ids import generate_block_id, is_valid_block_id

__version__ = "0.1.0"

__all__ = [
    "LogseqBlock",
    "TaskMarker",
    "TaskPriority",
    "OPEN_MARKERS",
    "CLOSED_MARKERS",
    "parse_blocks",
    "serialize_blocks",
    "flatten_blocks",
    "find_block_by_id",
    "new_block",
    "parse_task",
    "extract_block_refs",
    "has_block_refs",
    "resolve_block_refs",
    "resolve_block_refs_async",
    "create_block_ref",
    "BlockIndex",
    "BlockLocation",
    "GraphPaths",
    "page_title",
    "generate_block_id",
    "is_valid_block_id",
]
