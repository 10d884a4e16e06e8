"""Substring search over a Logseq graph.

Searches run against the files on disk at call time: every allowed markdown
file is read, split into frontmatter and body, and scanned for the query.
Blocks whose content or properties match become block-level results; a file
that matches only outside any block (for example in its frontmatter) yields a
single file-level result.
"""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import structlog

from logseq_blocks import TaskMarker, flatten_blocks, page_title, parse_blocks
from logseek.models.config import MAX_SEARCH_RESULTS
from logseek.models.search import BlockSearchResult, TaskSearchResult
from logseek.services.exceptions import InvalidQueryError
from logseek.services.frontmatter import split_frontmatter
from logseek.services.graph_store import GraphStore
from logseek.services.path_filter import PathFilter

logger = structlog.get_logger()

EXCERPT_RADIUS = 21
ELLIPSIS = "..."


@dataclass
class _Segment:
    """A searchable slice of a file and its offset in the raw text."""

    text: str
    offset: int


def _clamp_limit(limit: int) -> int:
    return max(1, min(limit, MAX_SEARCH_RESULTS))


def _compile_query(query: str, case_sensitive: bool) -> re.Pattern:
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(re.escape(query), flags)


def make_excerpt(text: str, start: int, end: int, radius: int = EXCERPT_RADIUS) -> str:
    """
    Cut an excerpt around a match.

    Args:
        text: Source text
        start: Match start offset
        end: Match end offset
        radius: Characters kept on each side of the match

    Returns:
        Excerpt with "..." on each side where text was cut
    """
    left = max(0, start - radius)
    right = min(len(text), end + radius)
    excerpt = text[left:right]
    if left > 0:
        excerpt = ELLIPSIS + excerpt
    if right < len(text):
        excerpt = excerpt + ELLIPSIS
    return excerpt


def _leading_excerpt(text: str, radius: int = EXCERPT_RADIUS) -> str:
    width = radius * 2
    if len(text) <= width:
        return text
    return text[:width] + ELLIPSIS


def _block_search_text(content: str, properties: dict, search_content: bool, search_properties: bool) -> str:
    parts = []
    if search_content:
        parts.append(content)
    if search_properties and properties:
        parts.append(json.dumps(properties, ensure_ascii=False))
    return " ".join(parts)


class SearchService:
    """Text and task search over one graph.

    Example:
        >>> service = SearchService(Path("~/Documents/logseq-graph"))
        >>> results = await service.search("quarterly review", limit=5)
        >>> tasks = await service.search_tasks(markers=["todo", "doing"])
    """

    def __init__(self, graph_path: Path, path_filter: Optional[PathFilter] = None):
        self.store = GraphStore(graph_path, path_filter)

    async def search(
        self,
        query: str,
        limit: int = 5,
        search_content: bool = True,
        search_frontmatter: bool = False,
        search_block_properties: bool = True,
        case_sensitive: bool = False,
    ) -> list[BlockSearchResult]:
        """
        Search the graph for a literal substring.

        Args:
            query: Text to look for (not a pattern)
            limit: Maximum results, clamped to 1..MAX_SEARCH_RESULTS
            search_content: Match against block content
            search_frontmatter: Match against YAML frontmatter
            search_block_properties: Match against block properties
            case_sensitive: Exact case matching

        Returns:
            Results in file order, then block document order

        Raises:
            InvalidQueryError: If the query is empty
        """
        if not query or not query.strip():
            raise InvalidQueryError("Search query must not be empty")

        cap = _clamp_limit(limit)
        pattern = _compile_query(query, case_sensitive)
        results: list[BlockSearchResult] = []
        files_scanned = 0

        logger.info(
            "search_started",
            query=query,
            limit=cap,
            content=search_content,
            frontmatter=search_frontmatter,
            properties=search_block_properties,
            case_sensitive=case_sensitive,
        )

        async for relative, text in self.store.iter_files():
            if len(results) >= cap:
                break
            files_scanned += 1
            try:
                file_results = self._search_file(
                    relative,
                    text,
                    pattern,
                    search_content,
                    search_frontmatter,
                    search_block_properties,
                )
            except ValueError as e:
                logger.warning("search_file_skipped", path=relative, error=str(e))
                continue
            results.extend(file_results[: cap - len(results)])

        logger.info("search_completed", query=query, files=files_scanned, results=len(results))
        return results

    def _search_file(
        self,
        relative: str,
        text: str,
        pattern: re.Pattern,
        search_content: bool,
        search_frontmatter: bool,
        search_properties: bool,
    ) -> list[BlockSearchResult]:
        split = split_frontmatter(text)

        segments: list[_Segment] = []
        if search_content and search_frontmatter and search_properties:
            segments.append(_Segment(text, 0))
        else:
            if search_frontmatter and split.block:
                segments.append(_Segment(split.header, split.header_offset))
            if search_content or search_properties:
                segments.append(_Segment(split.body, split.body_offset))

        if not any(pattern.search(segment.text) for segment in segments):
            return []

        title = page_title(relative)
        results: list[BlockSearchResult] = []

        if search_content or search_properties:
            for block in flatten_blocks(parse_blocks(split.body, relative)):
                haystack = _block_search_text(
                    block.content, block.properties, search_content, search_properties
                )
                hits = pattern.findall(haystack)
                if not hits:
                    continue

                in_content = pattern.search(block.content) if search_content else None
                if in_content:
                    excerpt = make_excerpt(block.content, in_content.start(), in_content.end())
                else:
                    excerpt = _leading_excerpt(block.content)

                results.append(
                    BlockSearchResult(
                        path=relative,
                        title=title,
                        block_id=block.block_id,
                        excerpt=excerpt,
                        match_count=len(hits),
                    )
                )

        if results:
            return results

        # File-level match: the hit lies outside every block
        first = None
        total = 0
        for segment in segments:
            matches = list(pattern.finditer(segment.text))
            total += len(matches)
            if first is None and matches:
                first = (segment, matches[0])

        segment, match = first
        line = text.count("\n", 0, segment.offset + match.start()) + 1
        return [
            BlockSearchResult(
                path=relative,
                title=title,
                excerpt=make_excerpt(segment.text, match.start(), match.end()),
                match_count=total,
                line=line,
            )
        ]

    async def search_tasks(
        self,
        markers: Optional[Iterable[str]] = None,
        path: Optional[str] = None,
        limit: int = MAX_SEARCH_RESULTS,
    ) -> list[TaskSearchResult]:
        """
        List blocks carrying a task marker.

        Args:
            markers: Marker spellings to keep (any case, aliases accepted);
                     None keeps every marker
            path: Only files whose graph-relative path starts with this
            limit: Maximum results, clamped to 1..MAX_SEARCH_RESULTS

        Returns:
            Task results in file order, then block document order

        Raises:
            InvalidQueryError: If a marker spelling is not recognized
        """
        wanted: Optional[set[TaskMarker]] = None
        if markers is not None:
            wanted = set()
            for spelling in markers:
                marker = TaskMarker.normalize(spelling)
                if marker is None:
                    raise InvalidQueryError(f"Unknown task marker: {spelling!r}")
                wanted.add(marker)

        cap = _clamp_limit(limit)
        results: list[TaskSearchResult] = []

        logger.info(
            "task_search_started",
            markers=sorted(m.value for m in wanted) if wanted is not None else None,
            path=path,
            limit=cap,
        )

        async for relative, text in self.store.iter_files(prefix=path):
            if len(results) >= cap:
                break
            try:
                blocks = parse_blocks(split_frontmatter(text).body, relative)
            except ValueError as e:
                logger.warning("task_search_file_skipped", path=relative, error=str(e))
                continue

            title = page_title(relative)
            for block in flatten_blocks(blocks):
                marker = block.marker
                if marker is None or (wanted is not None and marker not in wanted):
                    continue
                results.append(
                    TaskSearchResult(
                        path=relative,
                        title=title,
                        block_id=block.block_id,
                        content=block.content,
                        marker=marker,
                        priority=block.priority,
                    )
                )
                if len(results) >= cap:
                    break

        logger.info("task_search_completed", results=len(results))
        return results
