"""Custom exceptions for Logseek services."""


class LogseekError(Exception):
    """Base class for errors reported to Logseek callers."""


class InvalidQueryError(LogseekError, ValueError):
    """Raised when a search request violates the caller contract.

    Examples: an empty query, or a task marker filter naming an unknown marker.
    """


class AccessDeniedError(LogseekError, PermissionError):
    """Raised when a path is rejected by the path filter (.logseq, .git, ...).

    Attributes:
        path: Graph-relative path that was rejected
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Access denied: {path}. Restricted (e.g. .logseq, .git).")


class PathTraversalError(LogseekError, ValueError):
    """Raised when a path resolves outside the graph root."""


class PageNotFoundError(LogseekError, FileNotFoundError):
    """Raised when a page file does not exist.

    Attributes:
        path: Graph-relative path of the missing page
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}.")


class BlockNotFoundError(LogseekError, LookupError):
    """Raised when a write operation targets a block that does not exist.

    Lookups (find_block_by_id, reference resolution) return None instead;
    only operations that need the block to proceed raise this.

    Attributes:
        block_id: Identifier that could not be found
        message: Human-readable error message
    """

    def __init__(self, block_id: str, message: str = "Block not found"):
        self.block_id = block_id
        self.message = message
        super().__init__(f"{message}: {block_id}")
