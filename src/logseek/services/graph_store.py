"""Graph store: block-aware page access for a Logseq graph.

Every operation reads the files it needs at call time; nothing is cached
between calls. Write operations read a page, change its block tree,
re-serialize the whole body and replace the file atomically.
"""

from pathlib import Path
from typing import AsyncIterator, Optional

import structlog

from logseq_blocks import (
    BlockIndex,
    GraphPaths,
    LogseqBlock,
    create_block_ref,
    extract_block_refs,
    find_block_by_id,
    flatten_blocks,
    is_valid_block_id,
    new_block,
    resolve_block_refs,
    resolve_block_refs_async,
)
from logseq_blocks.parser import PropertyValue
from logseek.models.page import Page
from logseek.models.search import BlockReference
from logseek.services.exceptions import (
    AccessDeniedError,
    BlockNotFoundError,
    LogseekError,
    PageNotFoundError,
    PathTraversalError,
)
from logseek.services.file_operations import read_text, write_text
from logseek.services.path_filter import PathFilter

logger = structlog.get_logger()


def normalize_relative_path(path: str) -> str:
    """Graph-relative path with forward slashes and no leading slash."""
    return (path or "").strip().replace("\\", "/").lstrip("/")


class GraphStore:
    """Read and modify pages and blocks of one Logseq graph.

    Example:
        >>> store = GraphStore(Path("~/Documents/logseq-graph"))
        >>> page = await store.read_page("pages/Project X.md")
        >>> block = await store.append_block("pages/Project X.md", "TODO follow up")
    """

    def __init__(self, graph_path: Path, path_filter: Optional[PathFilter] = None):
        """
        Initialize graph store.

        Args:
            graph_path: Path to Logseq graph directory
            path_filter: Access filter (defaults to PathFilter())

        Raises:
            ValueError: If graph_path doesn't exist or isn't a directory
        """
        self.graph = GraphPaths(graph_path)
        self.path_filter = path_filter or PathFilter()

    @property
    def graph_path(self) -> Path:
        return self.graph.graph_path

    def _resolve(self, path: str) -> tuple[str, Path]:
        try:
            full_path = self.graph.resolve(normalize_relative_path(path))
        except ValueError as e:
            raise PathTraversalError(str(e)) from e
        # Filter the collapsed path so "pages/../.logseq/x.md" is caught
        relative = self.graph.relative(full_path)
        if not self.path_filter.is_allowed(relative):
            raise AccessDeniedError(relative)
        return relative, full_path

    async def iter_files(self, prefix: Optional[str] = None) -> AsyncIterator[tuple[str, str]]:
        """Yield (relative_path, text) for every allowed page file.

        Files are visited in sorted path order. Unreadable files are logged
        and skipped.

        Args:
            prefix: Only visit files whose relative path starts with this
        """
        prefix = normalize_relative_path(prefix) if prefix else None

        for full_path in self.graph.list_files(self.path_filter.allowed_extensions):
            relative = self.graph.relative(full_path)
            if prefix and not relative.startswith(prefix):
                continue
            if not self.path_filter.is_allowed(relative):
                continue
            try:
                text = await read_text(full_path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("graph_file_skipped", path=relative, error=str(e))
                continue
            yield relative, text

    async def iter_pages(self) -> AsyncIterator[Page]:
        """Yield every allowed page of the graph, parsed."""
        async for relative, text in self.iter_files():
            yield Page.from_text(relative, text)

    async def read_page(
        self,
        path: str,
        resolve_refs: bool = False,
        index: Optional[BlockIndex] = None,
    ) -> Page:
        """
        Read and parse one page.

        Args:
            path: Graph-relative path
            resolve_refs: Replace ((uuid)) tokens in the returned page content
                          with the referenced blocks' content
            index: Precomputed BlockIndex to resolve against (otherwise each
                   distinct reference triggers a graph scan)

        Returns:
            Parsed Page

        Raises:
            PathTraversalError: If the path escapes the graph
            AccessDeniedError: If the path filter rejects the path
            PageNotFoundError: If the file doesn't exist
        """
        relative, full_path = self._resolve(path)

        if full_path.is_dir():
            raise LogseekError(f"Cannot read directory as file: {relative}.")

        try:
            text = await read_text(full_path)
        except FileNotFoundError as e:
            raise PageNotFoundError(relative) from e

        page = Page.from_text(relative, text)

        if resolve_refs:
            if index is not None:
                page.content = resolve_block_refs(page.content, index.get)
            else:
                page.content = await resolve_block_refs_async(page.content, self.find_block_by_id)

        logger.debug("page_read", path=relative, blocks=len(page.blocks))
        return page

    async def find_block_by_id(self, block_id: str) -> Optional[LogseqBlock]:
        """
        Find a block anywhere in the graph by scanning every page.

        Args:
            block_id: Block identifier (any case)

        Returns:
            First matching block in file order, None if not found
        """
        if not is_valid_block_id(block_id):
            return None

        async for page in self.iter_pages():
            block = find_block_by_id(page.blocks, block_id)
            if block is not None:
                logger.debug("block_found", block_id=block.block_id, path=page.path)
                return block

        logger.debug("block_not_found", block_id=block_id)
        return None

    async def build_index(self) -> BlockIndex:
        """Build a BlockIndex over the whole graph."""
        index = BlockIndex()
        pages = 0
        async for page in self.iter_pages():
            index.add_blocks(page.path, page.blocks)
            pages += 1

        logger.info("block_index_built", pages=pages, blocks=len(index), duplicates=index.duplicates)
        return index

    async def _write_page(self, page: Page) -> None:
        _, full_path = self._resolve(page.path)
        await write_text(full_path, page.render())

    async def append_block(
        self,
        path: str,
        content: str,
        parent_id: Optional[str] = None,
        block_id: Optional[str] = None,
        properties: Optional[dict[str, PropertyValue]] = None,
    ) -> LogseqBlock:
        """
        Append a block at the end of a page, or as the last child of a block.

        Args:
            path: Graph-relative page path
            content: Block content (single line)
            parent_id: Identifier of the parent block (None = root level)
            block_id: Identifier for the new block (generated if None)
            properties: Optional properties for the new block

        Returns:
            The created block

        Raises:
            PageNotFoundError: If the page doesn't exist
            BlockNotFoundError: If parent_id is not on the page
            ValueError: If the content spans lines, or block_id or a property is malformed
        """
        page = await self.read_page(path)

        if parent_id:
            parent = find_block_by_id(page.blocks, parent_id)
            if parent is None:
                raise BlockNotFoundError(parent_id, "Parent block not found")
            block = parent.add_child(content, block_id=block_id, properties=properties)
        else:
            block = new_block(
                content,
                block_id=block_id,
                properties=properties,
                source_path=page.path,
            )
            page.blocks.append(block)

        await self._write_page(page)

        logger.info(
            "block_appended",
            path=page.path,
            block_id=block.block_id,
            parent_id=block.parent_id,
        )
        return block

    async def create_block_ref(self, target_path: str, target_block_id: str, ref_block_id: str) -> LogseqBlock:
        """
        Append a ((uuid)) reference to the content of a block.

        Args:
            target_path: Graph-relative path of the page holding the target block
            target_block_id: Block whose content receives the reference
            ref_block_id: Identifier of the referenced block

        Returns:
            The updated target block

        Raises:
            ValueError: If ref_block_id is not a valid identifier
            BlockNotFoundError: If the target block is not on the page
        """
        if not is_valid_block_id(ref_block_id):
            raise ValueError(f"Invalid block id: {ref_block_id!r}")

        page = await self.read_page(target_path)
        block = find_block_by_id(page.blocks, target_block_id)
        if block is None:
            raise BlockNotFoundError(target_block_id)

        block.content = f"{block.content} {create_block_ref(ref_block_id.lower())}".strip()
        await self._write_page(page)

        logger.info(
            "block_ref_created",
            path=page.path,
            block_id=block.block_id,
            ref_block_id=ref_block_id.lower(),
        )
        return block

    async def get_block_refs(self, block_id: str) -> list[BlockReference]:
        """
        Find every block in the graph whose content references block_id.

        Args:
            block_id: Referenced block identifier (any case)

        Returns:
            Referencing blocks in file and document order
        """
        target = block_id.strip().lower()
        results: list[BlockReference] = []

        async for page in self.iter_pages():
            for block in flatten_blocks(page.blocks):
                if target in extract_block_refs(block.content):
                    results.append(BlockReference(path=page.path, block=block))

        logger.debug("block_refs_found", block_id=target, count=len(results))
        return results
