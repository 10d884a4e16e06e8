"""Logseq block references: ((block-uuid)).

A reference token embeds another block's content by identifier. Resolution
replaces each token with the referenced block's content when the lookup
finds it and leaves the token exactly as written otherwise.
"""

import logging
import re
from typing import Awaitable, Callable, Optional

from logseq_blocks.ids import UUID_PATTERN
from logseq_blocks.parser import LogseqBlock

logger = logging.getLogger(__name__)

BLOCK_REF_PATTERN = re.compile(rf"\(\(({UUID_PATTERN})\)\)", re.IGNORECASE)

BlockLookup = Callable[[str], Optional[LogseqBlock]]
AsyncBlockLookup = Callable[[str], Awaitable[Optional[LogseqBlock]]]


def extract_block_refs(text: str) -> set[str]:
    """Extract all referenced block identifiers (lowercase, deduplicated)."""
    return {match.group(1).lower() for match in BLOCK_REF_PATTERN.finditer(text)}


def _ordered_block_refs(text: str) -> list[str]:
    seen: dict[str, None] = {}
    for match in BLOCK_REF_PATTERN.finditer(text):
        seen.setdefault(match.group(1).lower(), None)
    return list(seen)


def has_block_refs(text: str) -> bool:
    """Check if text contains block reference syntax."""
    return BLOCK_REF_PATTERN.search(text) is not None


def create_block_ref(block_id: str) -> str:
    """Create block reference token for an identifier.

    Examples:
        >>> create_block_ref("65f3a8e0-1234-5678-9abc-def012345678")
        '((65f3a8e0-1234-5678-9abc-def012345678))'
    """
    return f"(({block_id}))"


def resolve_block_refs(text: str, lookup: BlockLookup) -> str:
    """Replace block references with the content of the referenced blocks.

    Args:
        text: Text containing zero or more ((uuid)) tokens
        lookup: Called with each lowercase identifier; returns the block or None

    Returns:
        Text with every resolvable token replaced. Unresolved tokens keep
        their original spelling, and a lookup that raises counts as a miss.

    Examples:
        >>> resolve_block_refs("See ((11111111-1111-1111-1111-111111111111))", lambda _: None)
        'See ((11111111-1111-1111-1111-111111111111))'
    """

    def replace(match: re.Match) -> str:
        block_id = match.group(1).lower()
        try:
            block = lookup(block_id)
        except Exception as e:
            logger.warning("block_ref_lookup_failed block_id=%s error=%s", block_id, e)
            block = None
        return block.content if block is not None else match.group(0)

    return BLOCK_REF_PATTERN.sub(replace, text)


async def resolve_block_refs_async(text: str, lookup: AsyncBlockLookup) -> str:
    """Replace block references using an asynchronous lookup.

    Each distinct identifier is looked up exactly once, sequentially, in the
    order it first appears in the text; all of its occurrences are then
    substituted together.

    Args:
        text: Text containing zero or more ((uuid)) tokens
        lookup: Coroutine function returning the block or None

    Returns:
        Text with resolvable tokens replaced and the rest untouched
    """
    resolved: dict[str, Optional[str]] = {}
    for block_id in _ordered_block_refs(text):
        try:
            block = await lookup(block_id)
        except Exception as e:
            logger.warning("block_ref_lookup_failed block_id=%s error=%s", block_id, e)
            block = None
        resolved[block_id] = block.content if block is not None else None

    if not resolved:
        return text

    def replace(match: re.Match) -> str:
        content = resolved.get(match.group(1).lower())
        return content if content is not None else match.group(0)

    return BLOCK_REF_PATTERN.sub(replace, text)
