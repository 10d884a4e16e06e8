"""Logseq graph path operations.

This module provides utilities for navigating a Logseq graph directory:
enumerating its page files and mapping between graph-relative paths
and filesystem paths.
"""

from pathlib import Path
from typing import Iterable, Optional


MARKDOWN_SUFFIX = ".md"


class GraphPaths:
    """Utility class for Logseq graph path operations.

    Attributes:
        graph_path: Root path to Logseq graph directory (resolved)
    """

    def __init__(self, graph_path: Path):
        """Initialize with graph root path.

        Args:
            graph_path: Path to Logseq graph directory

        Raises:
            ValueError: If graph_path doesn't exist or isn't a directory
        """
        graph_path = Path(graph_path).expanduser()
        if not graph_path.exists():
            raise ValueError(f"Graph path does not exist: {graph_path}")
        if not graph_path.is_dir():
            raise ValueError(f"Graph path is not a directory: {graph_path}")

        self.graph_path = graph_path.resolve()

    def resolve(self, relative_path: str) -> Path:
        """Map a graph-relative path to an absolute path inside the graph.

        Leading slashes and surrounding whitespace are ignored, so "/pages/A.md"
        and "pages/A.md" name the same file.

        Args:
            relative_path: Path relative to the graph root

        Returns:
            Absolute filesystem path

        Raises:
            ValueError: If the path escapes the graph root
        """
        normalized = (relative_path or "").strip().lstrip("/\\")
        full_path = (self.graph_path / normalized).resolve()
        if full_path != self.graph_path and self.graph_path not in full_path.parents:
            raise ValueError(
                f"Path traversal not allowed: {relative_path}. Paths must be within the graph."
            )
        return full_path

    def relative(self, full_path: Path) -> str:
        """Graph-relative path of a file, always with forward slashes."""
        return Path(full_path).relative_to(self.graph_path).as_posix()

    def list_files(self, suffixes: Optional[Iterable[str]] = None) -> list[Path]:
        """List page files in the graph, recursively.

        Args:
            suffixes: File name endings to keep, compared case-insensitively
                      (defaults to ".md")

        Returns:
            Paths sorted by their graph-relative path, so traversal order is
            deterministic
        """
        endings = tuple(suffix.lower() for suffix in (suffixes or [MARKDOWN_SUFFIX]))
        files = [
            path
            for path in self.graph_path.rglob("*")
            if path.name.lower().endswith(endings) and path.is_file()
        ]
        return sorted(files, key=self.relative)


def page_title(relative_path: str) -> str:
    """Derive a page title: the file name without its extension.

    Examples:
        >>> page_title("pages/Project X.md")
        'Project X'
    """
    name = relative_path.replace("\\", "/").rsplit("/", 1)[-1]
    if "." in name[1:]:
        return name[: name.rindex(".")]
    return name
