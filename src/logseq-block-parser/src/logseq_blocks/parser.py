"""Logseq markdown parser for block-based documents.

This module handles parsing and rendering of Logseq's block format: bullets
("- ") nested by indentation (one tab or two spaces per level), each followed
by optional ``key:: value`` property lines indented one step deeper.

Parsing is tolerant. Blank lines, stray text and malformed properties are
skipped rather than rejected, so real-world pages always produce a usable
tree.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Optional, Union

from logseq_blocks.ids import generate_block_id, normalize_block_id

logger = logging.getLogger(__name__)

PropertyValue = Union[str, int, float, bool]

# Indentation written by the serializer (Logseq's native style)
INDENT_STR = "\t"

BULLET_REGEX = re.compile(r"^([\t ]*)-\s+(.*)$")

# Match key:: value property (after strip)
PROPERTY_REGEX = re.compile(r"^([A-Za-z0-9_-]+)::\s*(.*)$")

PROPERTY_KEY_REGEX = re.compile(r"^[A-Za-z0-9_-]+$")

_INTEGER_REGEX = re.compile(r"^-?[0-9]+$")
_DECIMAL_REGEX = re.compile(r"^-?[0-9]+\.[0-9]+$")


class TaskPriority(str, Enum):
    """Task priority written as [#A], [#B] or [#C] after the marker."""

    A = "A"
    B = "B"
    C = "C"


class TaskMarker(str, Enum):
    """Logseq task marker (https://docs.logseq.com/#/page/tasks).

    Open markers: TODO, LATER, NOW, DOING, IN-PROGRESS, WAIT
    Closed markers: DONE, CANCELED

    CANCELLED and WAITING are accepted as spellings of CANCELED and WAIT.
    """

    TODO = "TODO"
    DOING = "DOING"
    DONE = "DONE"
    LATER = "LATER"
    NOW = "NOW"
    CANCELED = "CANCELED"
    IN_PROGRESS = "IN-PROGRESS"
    WAIT = "WAIT"

    @classmethod
    def normalize(cls, spelling: str) -> Optional["TaskMarker"]:
        """Map any accepted spelling (any case, aliases included) to a marker.

        Args:
            spelling: Marker text such as "todo", "CANCELLED" or "Waiting"

        Returns:
            Canonical TaskMarker, or None if the spelling is not a marker
        """
        key = spelling.strip().upper()
        key = MARKER_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None

    @property
    def is_open(self) -> bool:
        return self not in CLOSED_MARKERS


MARKER_ALIASES = {
    "CANCELLED": "CANCELED",
    "WAITING": "WAIT",
}

CLOSED_MARKERS = frozenset({TaskMarker.DONE, TaskMarker.CANCELED})
OPEN_MARKERS = frozenset(set(TaskMarker) - CLOSED_MARKERS)

# Longer spellings must not be shadowed by their prefixes (WAIT/WAITING is
# handled by the trailing \b, which forces backtracking)
_MARKER_SPELLINGS = [marker.value for marker in TaskMarker] + list(MARKER_ALIASES)

TASK_MARKER_REGEX = re.compile(
    r"^(" + "|".join(re.escape(s) for s in _MARKER_SPELLINGS) + r")\b\s*"
    r"(?:\[#([ABC])\]\s*)?",
    re.IGNORECASE,
)


def parse_task(content: str) -> tuple[Optional[TaskMarker], Optional[TaskPriority]]:
    """Parse task marker and priority from the start of block content.

    The content itself is not modified. A priority is only recognized directly
    after a marker; "[#A] TODO x" has neither.

    Args:
        content: Block content (bullet line text)

    Returns:
        Tuple of (marker, priority), either of which may be None

    Examples:
        >>> parse_task("DOING [#A] Ship the release")
        (<TaskMarker.DOING: 'DOING'>, <TaskPriority.A: 'A'>)
        >>> parse_task("cancelled: no")
        (<TaskMarker.CANCELED: 'CANCELED'>, None)
    """
    match = TASK_MARKER_REGEX.match(content.strip())
    if not match:
        return None, None

    marker = TaskMarker.normalize(match.group(1))
    priority = TaskPriority(match.group(2).upper()) if match.group(2) else None
    return marker, priority


def parse_property_value(raw: str) -> PropertyValue:
    """Coerce a raw property value: true/false, integer, decimal, else string."""
    value = raw.strip()
    if value == "true":
        return True
    if value == "false":
        return False
    if _INTEGER_REGEX.match(value):
        return int(value)
    if _DECIMAL_REGEX.match(value):
        return float(value)
    return value


def format_property_value(value: PropertyValue) -> str:
    """Render a property value so parse_property_value() reads it back."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value):
        # Positional notation only; "1e-05" would read back as a string
        text = format(Decimal(repr(value)), "f")
        return text if "." in text else text + ".0"
    return str(value)


@dataclass
class LogseqBlock:
    """Single bullet in the outline with its properties and children.

    Attributes:
        content: Bullet line text, trimmed (task marker text left in place)
        depth: Nesting level (0 = root)
        block_id: Lowercase UUID, from the id:: property or freshly generated
        properties: Typed properties in source order (never contains "id")
        children: Child blocks, owned by this block
        parent_id: Identifier of the parent block (None for roots)
        source_path: Graph-relative path of the file the block came from
    """

    content: str
    depth: int = 0
    block_id: str = field(default_factory=generate_block_id)
    properties: dict[str, PropertyValue] = field(default_factory=dict)
    children: list["LogseqBlock"] = field(default_factory=list)
    parent_id: Optional[str] = None
    source_path: str = ""

    def __post_init__(self):
        """Normalize block_id to lowercase, rejecting malformed identifiers."""
        normalized = normalize_block_id(self.block_id)
        if normalized is None:
            raise ValueError(f"Invalid block id: {self.block_id!r}")
        self.block_id = normalized

    @property
    def marker(self) -> Optional[TaskMarker]:
        """Task marker recognized at the start of the content."""
        return parse_task(self.content)[0]

    @property
    def priority(self) -> Optional[TaskPriority]:
        """Task priority following the marker ([#A]/[#B]/[#C])."""
        return parse_task(self.content)[1]

    def get_property(self, key: str) -> Optional[PropertyValue]:
        """Get property value by key.

        Args:
            key: Property key ("id" returns the block identifier)

        Returns:
            Property value if found, None otherwise
        """
        if key == "id":
            return self.block_id
        return self.properties.get(key)

    def set_property(self, key: str, value: PropertyValue) -> None:
        """Set property value, preserving its position if it already exists.

        Setting "id" changes the block identifier instead of adding a property.

        Args:
            key: Property key, restricted to [A-Za-z0-9_-]+
            value: String, number or boolean value

        Raises:
            ValueError: If the key, the value or the identifier is malformed
        """
        if not PROPERTY_KEY_REGEX.match(key):
            raise ValueError(f"Invalid property name: {key!r}")

        if key == "id":
            normalized = normalize_block_id(value)
            if normalized is None:
                raise ValueError(f"Invalid block id: {value!r}")
            self.block_id = normalized
            for child in self.children:
                child.parent_id = normalized
            return

        text = format_property_value(value)
        if "\n" in text or "\r" in text:
            raise ValueError(f"Property value for {key!r} must be a single line")

        self.properties[key] = value

    def add_child(
        self,
        content: str,
        block_id: Optional[str] = None,
        properties: Optional[dict[str, PropertyValue]] = None,
        position: Optional[int] = None,
    ) -> "LogseqBlock":
        """Add child bullet one level deeper than this block.

        Args:
            content: The bullet content
            block_id: Identifier for the child (generated if None)
            properties: Optional properties for the child
            position: Optional index to insert at (None = append to end)

        Returns:
            The created child block

        Raises:
            ValueError: If content spans lines, or block_id or a property is malformed
        """
        child = new_block(
            content,
            depth=self.depth + 1,
            block_id=block_id,
            properties=properties,
            source_path=self.source_path,
        )
        child.parent_id = self.block_id

        if position is None:
            self.children.append(child)
        else:
            self.children.insert(position, child)

        return child

    def to_dict(self, include_children: bool = False) -> dict[str, Any]:
        """Render the block as a JSON-friendly dictionary.

        Args:
            include_children: Nest children recursively under "children"

        Returns:
            Dictionary with uuid, content, level and properties, plus marker,
            priority, parent_uuid and path when present
        """
        data: dict[str, Any] = {
            "uuid": self.block_id,
            "content": self.content,
            "level": self.depth,
            "properties": dict(self.properties),
        }
        marker, priority = parse_task(self.content)
        if marker:
            data["marker"] = marker.value
        if priority:
            data["priority"] = priority.value
        if self.parent_id:
            data["parent_uuid"] = self.parent_id
        if self.source_path:
            data["path"] = self.source_path
        if include_children:
            data["children"] = [child.to_dict(include_children=True) for child in self.children]
        return data


def new_block(
    content: str,
    depth: int = 0,
    block_id: Optional[str] = None,
    properties: Optional[dict[str, PropertyValue]] = None,
    source_path: str = "",
) -> LogseqBlock:
    """Create a detached block, validating its identifier and properties."""
    content = content.strip()
    if "\n" in content or "\r" in content:
        raise ValueError("Block content must be a single line")
    block = LogseqBlock(
        content=content,
        depth=depth,
        block_id=block_id if block_id is not None else generate_block_id(),
        source_path=source_path,
    )
    for key, value in (properties or {}).items():
        block.set_property(key, value)
    return block


def _leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip(" \t"))]


def _indent_width(whitespace: str) -> float:
    """Indentation in levels: a tab is one level, two spaces are one level."""
    return whitespace.count("\t") + whitespace.count(" ") / 2


def parse_blocks(content: str, source_path: str = "") -> list[LogseqBlock]:
    """Parse Logseq markdown body text into a forest of blocks.

    Content must already be stripped of frontmatter. Each bullet line starts
    a block; the property lines directly below it (indented deeper than the
    bullet) become its properties. Anything else is skipped.

    Args:
        content: Markdown body text
        source_path: Graph-relative path stamped on every block

    Returns:
        Root blocks in document order

    Examples:
        >>> blocks = parse_blocks("- Parent\\n\\t- Child")
        >>> blocks[0].children[0].content
        'Child'
    """
    lines = [line.rstrip("\r") for line in content.split("\n")]
    items: list[tuple[int, str, dict[str, PropertyValue]]] = []

    i = 0
    while i < len(lines):
        match = BULLET_REGEX.match(lines[i])
        i += 1
        if not match:
            continue

        level = int(_indent_width(match.group(1)))
        properties: dict[str, PropertyValue] = {}

        while i < len(lines):
            next_line = lines[i]
            stripped = next_line.strip()
            if not stripped or _indent_width(_leading_whitespace(next_line)) <= level:
                break
            prop_match = PROPERTY_REGEX.match(stripped)
            if not prop_match:
                break
            key, value = prop_match.groups()
            properties[key] = parse_property_value(value)
            i += 1

        items.append((level, match.group(2).strip(), properties))

    return _build_block_tree(items, source_path)


def _build_block_tree(
    items: list[tuple[int, str, dict[str, PropertyValue]]],
    source_path: str,
) -> list[LogseqBlock]:
    """Build block tree from flat (level, content, properties) items.

    A block becomes the child of the nearest preceding block with a smaller
    source level. Stored depth is the parent's depth + 1, so skipped
    indentation levels collapse.
    """
    roots: list[LogseqBlock] = []
    stack: list[tuple[LogseqBlock, int]] = []

    for level, content, properties in items:
        raw_id = properties.pop("id", None)
        block_id = normalize_block_id(raw_id)
        if block_id is None:
            if raw_id is not None:
                logger.debug("Ignoring malformed id property %r in %s", raw_id, source_path)
            block_id = generate_block_id()

        block = LogseqBlock(
            content=content,
            block_id=block_id,
            properties=properties,
            source_path=source_path,
        )

        while stack and stack[-1][1] >= level:
            stack.pop()

        if stack:
            parent = stack[-1][0]
            block.depth = parent.depth + 1
            block.parent_id = parent.block_id
            parent.children.append(block)
        else:
            roots.append(block)

        stack.append((block, level))

    return roots


def serialize_blocks(blocks: Iterable[LogseqBlock]) -> str:
    """Serialize blocks back to Logseq markdown.

    Every block is written as a tab-indented bullet, followed by its id::
    line and its remaining properties one level deeper, then its children.
    Indentation follows tree position.

    Args:
        blocks: Root blocks

    Returns:
        Markdown body text (no trailing newline)
    """
    lines: list[str] = []

    def render_block(block: LogseqBlock, depth: int) -> None:
        lines.append(f"{INDENT_STR * depth}- {block.content.strip()}")

        property_indent = INDENT_STR * (depth + 1)
        lines.append(f"{property_indent}id:: {block.block_id}")
        for key, value in block.properties.items():
            lines.append(f"{property_indent}{key}:: {format_property_value(value)}")

        for child in block.children:
            render_block(child, depth + 1)

    for block in blocks:
        render_block(block, 0)

    return "\n".join(lines)


def flatten_blocks(blocks: Iterable[LogseqBlock]) -> list[LogseqBlock]:
    """Flatten block tree to a list (pre-order, parents before children)."""
    result: list[LogseqBlock] = []

    def visit(block: LogseqBlock) -> None:
        result.append(block)
        for child in block.children:
            visit(child)

    for block in blocks:
        visit(block)

    return result


def find_block_by_id(blocks: Iterable[LogseqBlock], block_id: str) -> Optional[LogseqBlock]:
    """Find block by identifier in a tree.

    Args:
        blocks: Root blocks to search
        block_id: Identifier to look for (any case)

    Returns:
        First matching block in document order, None if not present
    """
    target = block_id.strip().lower()
    for block in flatten_blocks(blocks):
        if block.block_id == target:
            return block
    return None
