#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/ast/nodes.py
"""Document tree node classes.

This module defines the node hierarchy consumed by the styled-run converter.
Each node represents a structural or inline element of a parsed markdown
document.

The node model is designed to:
- Expose a closed set of node kinds (``NodeKind``) for table-driven dispatch
- Give every node an ordered ``children`` list, regardless of its kind
- Keep a non-owning ``parent`` back-reference and the node's position among
  its siblings, so containment and nesting can be answered by walking up

Node Kinds
----------
Block-level nodes:
    - Document, Paragraph, Heading, CodeBlock, BlockQuote
    - UnorderedList, OrderedList, ListItem
    - ThematicBreak, HTMLBlock

Inline nodes:
    - Text, Emphasis, Strong, Strikethrough, InlineCode
    - Link, Image, LineBreak, HTMLInline

Back-references are assigned when a container is constructed: every child
passed to the constructor is linked to the new node. Trees assembled or
edited in place afterwards can be re-linked with ``link_tree``.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Iterator, Optional


class NodeKind(str, Enum):
    """Closed set of node kinds understood by the converter."""

    DOCUMENT = "document"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    TEXT = "text"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    INLINE_CODE = "inline_code"
    CODE_BLOCK = "code_block"
    LINK = "link"
    IMAGE = "image"
    UNORDERED_LIST = "unordered_list"
    ORDERED_LIST = "ordered_list"
    LIST_ITEM = "list_item"
    BLOCK_QUOTE = "block_quote"
    LINE_BREAK = "line_break"
    THEMATIC_BREAK = "thematic_break"
    HTML_BLOCK = "html_block"
    HTML_INLINE = "html_inline"


class Node:
    """Base class for all document tree nodes.

    Subclasses are dataclasses declaring their own fields; the base class
    provides parent linking and the sibling-position helpers.

    Attributes
    ----------
    kind : NodeKind
        The node's kind, fixed per subclass
    children : list of Node
        Ordered child nodes (empty for leaves)
    parent : Node or None
        Non-owning back-reference to the containing node
    index_in_parent : int
        Position of this node among its parent's children

    """

    kind: ClassVar[NodeKind]
    children: list[Node]
    metadata: dict[str, Any]
    parent: Optional[Node]
    index_in_parent: int

    def __post_init__(self) -> None:
        """Link direct children to this node."""
        self.parent = None
        self.index_in_parent = 0
        _link_children(self)

    @property
    def has_successor(self) -> bool:
        """Return True if this node has a following sibling."""
        if self.parent is None:
            return False
        return self.index_in_parent < len(self.parent.children) - 1

    def ancestors(self) -> Iterator[Node]:
        """Yield ancestors from the parent up to the root.

        The iteration is unbounded; callers that must defend against cyclic
        input should use the bounded walks in ``md2runs.ast.tree``.

        """
        current = self.parent
        while current is not None:
            yield current
            current = current.parent


def _link_children(node: Node) -> None:
    for index, child in enumerate(node.children):
        child.parent = node
        child.index_in_parent = index


def link_tree(root: Node) -> Node:
    """Re-establish parent links and sibling positions for a whole tree.

    Parameters
    ----------
    root : Node
        Root of the tree (typically a Document)

    Returns
    -------
    Node
        The same root, for chaining

    Notes
    -----
    Uses an explicit stack, so very deep trees do not hit the recursion limit.

    """
    root.parent = None
    root.index_in_parent = 0
    stack: list[Node] = [root]
    while stack:
        node = stack.pop()
        _link_children(node)
        stack.extend(node.children)
    return root


# ============================================================================
# Block-level Nodes
# ============================================================================


@dataclass(eq=True)
class Document(Node):
    """Root document node containing block-level children.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level nodes in the document
    metadata : dict, default = empty dict
        Document-level metadata

    """

    kind: ClassVar[NodeKind] = NodeKind.DOCUMENT

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class Paragraph(Node):
    """Paragraph node containing inline content."""

    kind: ClassVar[NodeKind] = NodeKind.PARAGRAPH

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class Heading(Node):
    """Heading node (levels 1-6).

    Parameters
    ----------
    level : int
        Heading level (1-6, where 1 is most important)
    children : list of Node, default = empty list
        Inline nodes representing heading text

    """

    kind: ClassVar[NodeKind] = NodeKind.HEADING

    level: int
    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate heading level is between 1 and 6."""
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be 1-6, got {self.level}")
        super().__post_init__()


@dataclass(eq=True)
class CodeBlock(Node):
    """Fenced or indented code block.

    Parameters
    ----------
    code : str
        Literal code content (not parsed as markdown)
    language : str or None, default = None
        Info-string language, if any

    """

    kind: ClassVar[NodeKind] = NodeKind.CODE_BLOCK

    code: str
    language: Optional[str] = None
    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class BlockQuote(Node):
    """Block quote containing other block elements."""

    kind: ClassVar[NodeKind] = NodeKind.BLOCK_QUOTE

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class UnorderedList(Node):
    """Bulleted list whose children are ListItem nodes."""

    kind: ClassVar[NodeKind] = NodeKind.UNORDERED_LIST

    children: list[Node] = field(default_factory=list)
    tight: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class OrderedList(Node):
    """Numbered list whose children are ListItem nodes.

    Parameters
    ----------
    children : list of Node, default = empty list
        The list items
    start : int, default = 1
        Start number declared in the source; markers are always numbered from 1
    tight : bool, default = True
        Whether the list is tight (no blank lines between items)

    """

    kind: ClassVar[NodeKind] = NodeKind.ORDERED_LIST

    children: list[Node] = field(default_factory=list)
    start: int = 1
    tight: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class ListItem(Node):
    """List item containing block content (paragraphs, nested lists, ...)."""

    kind: ClassVar[NodeKind] = NodeKind.LIST_ITEM

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class ThematicBreak(Node):
    """Horizontal rule."""

    kind: ClassVar[NodeKind] = NodeKind.THEMATIC_BREAK

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class HTMLBlock(Node):
    """Raw HTML block, kept verbatim."""

    kind: ClassVar[NodeKind] = NodeKind.HTML_BLOCK

    content: str
    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


# ============================================================================
# Inline Nodes
# ============================================================================


@dataclass(eq=True)
class Text(Node):
    """Plain text leaf."""

    kind: ClassVar[NodeKind] = NodeKind.TEXT

    content: str
    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class Emphasis(Node):
    """Emphasized (italic) inline content."""

    kind: ClassVar[NodeKind] = NodeKind.EMPHASIS

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class Strong(Node):
    """Strong (bold) inline content."""

    kind: ClassVar[NodeKind] = NodeKind.STRONG

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class Strikethrough(Node):
    """Struck-through inline content."""

    kind: ClassVar[NodeKind] = NodeKind.STRIKETHROUGH

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class InlineCode(Node):
    """Inline code span."""

    kind: ClassVar[NodeKind] = NodeKind.INLINE_CODE

    code: str
    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class Link(Node):
    """Hyperlink.

    Parameters
    ----------
    destination : str or None
        Link destination as written in the source; None when absent
    children : list of Node, default = empty list
        Inline nodes representing the link text
    title : str or None, default = None
        Optional link title

    """

    kind: ClassVar[NodeKind] = NodeKind.LINK

    destination: Optional[str] = None
    children: list[Node] = field(default_factory=list)
    title: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class Image(Node):
    """Embedded image.

    Parameters
    ----------
    source : str or None
        Image source URL as written in the source; None when absent
    title : str or None, default = None
        Optional image title
    children : list of Node, default = empty list
        Inline nodes representing the alt text

    """

    kind: ClassVar[NodeKind] = NodeKind.IMAGE

    source: Optional[str] = None
    title: Optional[str] = None
    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class LineBreak(Node):
    """Line break inside a paragraph.

    Parameters
    ----------
    soft : bool, default = False
        True for a soft break (a plain newline in the source), False for a
        hard break (trailing backslash or two trailing spaces)

    """

    kind: ClassVar[NodeKind] = NodeKind.LINE_BREAK

    soft: bool = False
    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=True)
class HTMLInline(Node):
    """Raw inline HTML, kept verbatim."""

    kind: ClassVar[NodeKind] = NodeKind.HTML_INLINE

    content: str
    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


LIST_CONTAINER_KINDS = frozenset({NodeKind.UNORDERED_LIST, NodeKind.ORDERED_LIST})


def is_list_container(node: Node) -> bool:
    """Return True for nodes that hold list items (ordered or unordered lists)."""
    return node.kind in LIST_CONTAINER_KINDS


def is_block_quote(node: Node) -> bool:
    """Return True for block quote nodes."""
    return node.kind is NodeKind.BLOCK_QUOTE
