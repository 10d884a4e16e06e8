"""Logseq URL utilities.

Provides helpers for creating logseq:// protocol URLs.
"""

from pathlib import Path
from typing import Optional
from urllib.parse import quote


def create_logseq_url(page_name: str, graph_path: Path, block_id: Optional[str] = None) -> str:
    """Create a logseq:// URL for a page or block.

    Args:
        page_name: Name of the Logseq page
        graph_path: Path to the Logseq graph directory
        block_id: Optional block UUID to link directly to a block

    Returns:
        Formatted logseq:// URL

    Example:
        >>> create_logseq_url("Python Programming", Path("/home/user/graph"))
        'logseq://graph/graph?page=Python%20Programming'
        >>> create_logseq_url("Python Programming", Path("/home/user/graph"),
        ...                   block_id="67ed05bf-4e74-4087-a9de-d9e25166d1b9")
        'logseq://graph/graph?block-id=67ed05bf-4e74-4087-a9de-d9e25166d1b9'
    """
    encoded_graph = quote(graph_path.name, safe='')

    if block_id:
        return f"logseq://graph/{encoded_graph}?block-id={quote(block_id, safe='')}"
    return f"logseq://graph/{encoded_graph}?page={quote(page_name, safe='')}"


def create_terminal_link(text: str, url: str) -> str:
    """Wrap text in an OSC 8 hyperlink so terminals render it clickable."""
    return f"\033]8;;{url}\033\\{text}\033]8;;\033\\"
