"""Corpus-wide block identifier index.

Block identifiers are meant to be unique across a whole graph, but nothing
enforces it. BlockIndex makes the identifier space explicit: it maps each
identifier to the file and block where it was first seen, so repeated
lookups do not need to re-scan every file.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from logseq_blocks.parser import LogseqBlock, flatten_blocks


@dataclass(frozen=True)
class BlockLocation:
    """Where an indexed block lives.

    Attributes:
        path: Graph-relative path of the file
        block: The parsed block
    """

    path: str
    block: LogseqBlock


class BlockIndex:
    """Mapping from block identifier to its location in the graph.

    The first occurrence of an identifier wins; later duplicates are counted
    but not stored.

    Example:
        >>> index = BlockIndex()
        >>> index.add_blocks("pages/Project.md", parse_blocks(text, "pages/Project.md"))
        >>> index.get("65f3a8e0-1234-5678-9abc-def012345678")
        LogseqBlock(...)
    """

    def __init__(self) -> None:
        self._locations: dict[str, BlockLocation] = {}
        self.duplicates = 0

    def add_blocks(self, path: str, blocks: Iterable[LogseqBlock]) -> int:
        """Index every block of a forest.

        Args:
            path: Graph-relative path the blocks were parsed from
            blocks: Root blocks

        Returns:
            Number of identifiers newly added
        """
        added = 0
        for block in flatten_blocks(blocks):
            if block.block_id in self._locations:
                self.duplicates += 1
                continue
            self._locations[block.block_id] = BlockLocation(path=path, block=block)
            added += 1
        return added

    def locate(self, block_id: str) -> Optional[BlockLocation]:
        return self._locations.get(block_id.strip().lower())

    def get(self, block_id: str) -> Optional[LogseqBlock]:
        """Look up a block by identifier (same contract as find_block_by_id)."""
        location = self.locate(block_id)
        return location.block if location else None

    def __contains__(self, block_id: object) -> bool:
        return isinstance(block_id, str) and self.locate(block_id) is not None

    def __len__(self) -> int:
        return len(self._locations)

    def __iter__(self) -> Iterator[str]:
        return iter(self._locations)
