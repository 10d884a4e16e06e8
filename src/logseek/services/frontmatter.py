"""YAML frontmatter handling for Logseq pages.

Pages may start with a YAML header delimited by ``---`` lines. The header is
parsed into a mapping and separated from the body, which is what the block
parser sees. Unparseable headers are left in the body untouched.
"""

import re
from dataclasses import dataclass, field
from typing import Any

import yaml
import structlog

logger = structlog.get_logger()

FRONTMATTER_REGEX = re.compile(
    r"\A---[ \t]*\r?\n(?P<header>.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


@dataclass
class FrontmatterSplit:
    """Result of separating frontmatter from a page.

    Attributes:
        data: Parsed header mapping (empty if there is no valid header)
        body: Text after the header (the whole text if there is none)
        header: Header text between the delimiters
        header_offset: Offset of header within the original text
        block: Raw delimited header exactly as written, "" if none
    """

    data: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    header: str = ""
    header_offset: int = 0
    block: str = ""

    @property
    def body_offset(self) -> int:
        return len(self.block)


def split_frontmatter(text: str) -> FrontmatterSplit:
    """Separate YAML frontmatter from body text.

    Args:
        text: Full page text

    Returns:
        FrontmatterSplit; a missing, malformed or non-mapping header leaves
        data empty and body equal to text
    """
    match = FRONTMATTER_REGEX.match(text)
    if not match:
        return FrontmatterSplit(body=text)

    header = match.group("header")
    try:
        data = yaml.safe_load(header) if header.strip() else {}
    except yaml.YAMLError as e:
        logger.warning("frontmatter_invalid", error=str(e))
        return FrontmatterSplit(body=text)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        logger.warning("frontmatter_not_mapping", type=type(data).__name__)
        return FrontmatterSplit(body=text)

    return FrontmatterSplit(
        data=data,
        body=text[match.end():],
        header=header,
        header_offset=match.start("header"),
        block=match.group(0),
    )


def join_frontmatter(data: dict[str, Any], body: str, block: str = "") -> str:
    """Re-attach frontmatter to a body.

    Args:
        data: Header mapping
        body: Body text
        block: Original raw header; reused verbatim when given so untouched
               headers keep their formatting

    Returns:
        Full page text
    """
    if block:
        if not block.endswith("\n") and body:
            block += "\n"
        return block + body
    if not data:
        return body
    header = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f"---\n{header}---\n{body}"
