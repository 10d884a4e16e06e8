"""Path filter for Logseq graphs.

Excludes .logseq, .git and other system files, and restricts files to
text-like extensions.
"""

import re
from typing import Iterable, Optional


DEFAULT_IGNORED_PATTERNS = [
    ".logseq/**",
    ".git/**",
    "node_modules/**",
    ".DS_Store",
    "Thumbs.db",
]

DEFAULT_ALLOWED_EXTENSIONS = [".md", ".markdown", ".txt"]

_EXTENSION_REGEX = re.compile(r"^[A-Za-z0-9]{1,10}$")


def _glob_to_regex(pattern: str) -> re.Pattern:
    """Compile a glob: ** spans directories, * and ? stay within one segment."""
    escaped = re.escape(pattern.replace("\\", "/"))
    escaped = escaped.replace(r"\*\*", ".*").replace(r"\*", "[^/]*").replace(r"\?", "[^/]")
    return re.compile(f"^{escaped}$")


class PathFilter:
    """Decide whether a graph-relative path may be read or listed.

    Patterns containing a slash are matched against the whole path; patterns
    without one (".DS_Store") are matched against the last path component.

    Example:
        >>> path_filter = PathFilter()
        >>> path_filter.is_allowed("pages/Project.md")
        True
        >>> path_filter.is_allowed(".logseq/config.edn")
        False
    """

    def __init__(
        self,
        ignored_patterns: Optional[Iterable[str]] = None,
        allowed_extensions: Optional[Iterable[str]] = None,
    ):
        self.ignored_patterns = DEFAULT_IGNORED_PATTERNS + list(ignored_patterns or [])
        self.allowed_extensions = DEFAULT_ALLOWED_EXTENSIONS + [
            ext if ext.startswith(".") else f".{ext}" for ext in (allowed_extensions or [])
        ]
        self._compiled = [(pattern, _glob_to_regex(pattern)) for pattern in self.ignored_patterns]

    def is_allowed(self, path: str) -> bool:
        """Check a graph-relative path against ignore patterns and extensions.

        Args:
            path: Path relative to the graph root (either slash style)

        Returns:
            True if the path may be accessed
        """
        normalized = path.replace("\\", "/").lstrip("/")
        name = normalized.rstrip("/").rsplit("/", 1)[-1]

        for pattern, regex in self._compiled:
            target = normalized if "/" in pattern else name
            if regex.match(target):
                return False

        extension = _file_extension(normalized)
        if extension is not None:
            return any(
                normalized.lower().endswith(ext.lower()) for ext in self.allowed_extensions
            )

        return True


def _file_extension(path: str) -> Optional[str]:
    """Extension of a path that looks like a file, None for directories."""
    if path.endswith("/"):
        return None
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    if dot <= 0:
        return None
    extension = name[dot + 1:]
    return extension if _EXTENSION_REGEX.match(extension) else None
