#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/ast/__init__.py
"""Document tree model and ancestor-chain queries."""

from md2runs.ast.nodes import (
    BlockQuote,
    CodeBlock,
    Document,
    Emphasis,
    Heading,
    HTMLBlock,
    HTMLInline,
    Image,
    InlineCode,
    LineBreak,
    Link,
    ListItem,
    Node,
    NodeKind,
    OrderedList,
    Paragraph,
    Strikethrough,
    Strong,
    Text,
    ThematicBreak,
    UnorderedList,
    is_block_quote,
    is_list_container,
    link_tree,
)
from md2runs.ast.tree import (
    depth_of,
    find_ancestor,
    is_contained_in_list,
    iter_ancestors,
    list_depth,
    quote_depth,
    walk,
)

__all__ = [
    "Node",
    "NodeKind",
    "Document",
    "Paragraph",
    "Heading",
    "Text",
    "Emphasis",
    "Strong",
    "Strikethrough",
    "InlineCode",
    "CodeBlock",
    "Link",
    "Image",
    "UnorderedList",
    "OrderedList",
    "ListItem",
    "BlockQuote",
    "LineBreak",
    "ThematicBreak",
    "HTMLBlock",
    "HTMLInline",
    "is_block_quote",
    "is_list_container",
    "link_tree",
    "depth_of",
    "find_ancestor",
    "is_contained_in_list",
    "iter_ancestors",
    "list_depth",
    "quote_depth",
    "walk",
]
