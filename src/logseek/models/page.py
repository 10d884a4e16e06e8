"""Page model: one graph file with frontmatter and its block tree."""

from dataclasses import dataclass, field
from typing import Any

from logseq_blocks import LogseqBlock, page_title, parse_blocks, serialize_blocks
from logseek.services.frontmatter import join_frontmatter, split_frontmatter


@dataclass
class Page:
    """A Logseq page read from the graph.

    Built fresh on every read. Write operations mutate ``blocks`` and then
    persist ``render()``; the instance is discarded afterwards.

    Attributes:
        path: Graph-relative file path (e.g., "pages/Project X.md")
        frontmatter: Parsed YAML header (empty if none)
        content: Body text after the header
        original_content: Full file text as read
        blocks: Root blocks parsed from the body
        frontmatter_block: Raw header text, reused verbatim on write
    """

    path: str
    frontmatter: dict[str, Any]
    content: str
    original_content: str
    blocks: list[LogseqBlock] = field(default_factory=list)
    frontmatter_block: str = ""

    @classmethod
    def from_text(cls, path: str, text: str) -> "Page":
        """Parse a page from its full file text.

        Args:
            path: Graph-relative path (stamped on every block)
            text: File content

        Returns:
            Parsed Page
        """
        split = split_frontmatter(text)
        return cls(
            path=path,
            frontmatter=split.data,
            content=split.body,
            original_content=text,
            blocks=parse_blocks(split.body, path),
            frontmatter_block=split.block,
        )

    @property
    def title(self) -> str:
        return page_title(self.path)

    def render(self) -> str:
        """Serialize the block tree under the original frontmatter."""
        return join_frontmatter(self.frontmatter, serialize_blocks(self.blocks), self.frontmatter_block)

    def to_dict(self, include_blocks: bool = True) -> dict[str, Any]:
        """Render the page as a JSON-friendly dictionary (fm, content, blocks)."""
        data: dict[str, Any] = {
            "path": self.path,
            "fm": self.frontmatter,
            "content": self.content,
        }
        if include_blocks:
            data["blocks"] = [block.to_dict(include_children=True) for block in self.blocks]
        return data
