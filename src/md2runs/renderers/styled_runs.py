#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/renderers/styled_runs.py
"""Convert a document tree into a sequence of styled text runs.

The renderer walks the tree depth-first, left to right, with an explicit stack
and dispatches on ``NodeKind`` through a table built once per instance. Every
handler receives the converted output of its children and returns a fresh
``StyledDocument`` for its node; container handlers apply their style union
to the child output (``map_runs``) before it is appended to the parent,
so runs are never restyled after they have been appended.

Separator rules
---------------
- Paragraph: one newline inside a list, two newlines elsewhere
- Heading, unordered list, block quote: two newlines
- Ordered list: one newline when nested in another list, two elsewhere
- List item, code block: one newline

Separators are only emitted when the node has a following sibling, so the
output never ends with a separator run.

Malformed link and image destinations never raise: the affected attribute is
omitted and the text is kept.
"""

from __future__ import annotations

import logging
from typing import Callable

from md2runs.ast import (
    BlockQuote,
    CodeBlock,
    Heading,
    Image,
    InlineCode,
    LineBreak,
    Link,
    Node,
    NodeKind,
    OrderedList,
    Paragraph,
    Text,
    UnorderedList,
    is_contained_in_list,
    list_depth,
    quote_depth,
)
from md2runs.constants import (
    CODE_FONT_SIZE_DELTA,
    DOUBLE_NEWLINE,
    HEADING_REFERENCE_FONT_SIZE,
    HEADING_SIZE_BASE,
    HEADING_SIZE_STEP,
    MARKER_TAB,
    OBJECT_REPLACEMENT_CHAR,
    SINGLE_NEWLINE,
)
from md2runs.exceptions import MalformedTreeError
from md2runs.options.converter import StyledRunOptions
from md2runs.parsers.markdown import markdown_to_ast
from md2runs.renderers.base import BaseRenderer
from md2runs.styling.attributes import ColorTag, FontFamily, ImageMarker, StyleAttributes
from md2runs.styling.layout import FontMetrics, IndentLayout, code_block_paragraph_style, compute_indent_layout
from md2runs.styling.runs import StyledDocument, StyledRun
from md2runs.utils.decorators import debug_timer
from md2runs.utils.links import is_valid_uri, resolve_link_destination

logger = logging.getLogger(__name__)

Handler = Callable[[Node, list[StyledDocument]], StyledDocument]


def heading_font_size(level: int, base_font_size: float) -> float:
    """Return the point size for a heading level.

    The size is ``28 - 2 * level`` at a 15pt base and scales proportionally
    with the base size, so level 1 is always the largest.

    Parameters
    ----------
    level : int
        Heading level (1-6)
    base_font_size : float
        Body text size

    Returns
    -------
    float
        Heading point size

    """
    return (HEADING_SIZE_BASE - HEADING_SIZE_STEP * level) * base_font_size / HEADING_REFERENCE_FONT_SIZE


class StyledRunRenderer(BaseRenderer):
    """Render document trees into ``StyledDocument`` run sequences.

    The renderer holds no per-conversion state; one instance can convert any
    number of independent trees, including concurrently.

    Parameters
    ----------
    options : StyledRunOptions or None, default = None
        Converter configuration; defaults to a 15pt base font

    Examples
    --------
        >>> renderer = StyledRunRenderer()
        >>> doc = renderer.render_markdown("# Heading\\n\\nBody text")
        >>> doc.text
        'Heading\n\nBody text'

    """

    def __init__(self, options: StyledRunOptions | None = None):
        """Initialize the renderer with options."""
        BaseRenderer._validate_options_type(options, StyledRunOptions, "styled_runs")
        options = options or StyledRunOptions()
        BaseRenderer.__init__(self, options)
        self.options: StyledRunOptions = options
        self._metrics = FontMetrics(options.body_font, options.numeral_font)
        self._handlers: dict[NodeKind, Handler] = self._build_dispatch_table()

    def _build_dispatch_table(self) -> dict[NodeKind, Handler]:
        """Map every node kind to its handler.

        Kinds without a specific rule concatenate their children.
        """
        return {
            NodeKind.DOCUMENT: self._convert_children,
            NodeKind.PARAGRAPH: self._render_paragraph,
            NodeKind.HEADING: self._render_heading,
            NodeKind.TEXT: self._render_text,
            NodeKind.EMPHASIS: self._render_emphasis,
            NodeKind.STRONG: self._render_strong,
            NodeKind.STRIKETHROUGH: self._render_strikethrough,
            NodeKind.INLINE_CODE: self._render_inline_code,
            NodeKind.CODE_BLOCK: self._render_code_block,
            NodeKind.LINK: self._render_link,
            NodeKind.IMAGE: self._render_image,
            NodeKind.UNORDERED_LIST: self._render_unordered_list,
            NodeKind.ORDERED_LIST: self._render_ordered_list,
            NodeKind.LIST_ITEM: self._render_list_item,
            NodeKind.BLOCK_QUOTE: self._render_block_quote,
            NodeKind.LINE_BREAK: self._render_line_break,
            NodeKind.THEMATIC_BREAK: self._convert_children,
            NodeKind.HTML_BLOCK: self._convert_children,
            NodeKind.HTML_INLINE: self._convert_children,
        }

    @property
    def base_font_size(self) -> float:
        return self.options.base_font_size

    def render(self, doc: Node) -> StyledDocument:
        """Convert a document tree into styled runs.

        Parameters
        ----------
        doc : Node
            Root of a linked, acyclic tree (normally a Document)

        Returns
        -------
        StyledDocument
            Fresh run sequence owned by the caller

        Raises
        ------
        MalformedTreeError
            If a node occurs inside its own subtree

        """
        with debug_timer(logger, "Styled-run conversion"):
            result = self._convert(doc)
        logger.debug(f"Converted {doc.kind.value} into {len(result)} runs ({len(result.text)} characters)")
        return result

    def render_markdown(self, markdown_content: str, unescape: bool = True) -> StyledDocument:
        r"""Parse markdown and convert it into styled runs.

        Parameters
        ----------
        markdown_content : str
            Markdown text
        unescape : bool, default True
            Rewrite literal ``\n`` sequences to newlines before parsing

        Returns
        -------
        StyledDocument
            Converted runs

        """
        return self.render(markdown_to_ast(markdown_content, unescape=unescape))

    def render_to_string(self, doc: Node) -> str:
        """Return the plain text of the converted document."""
        return self.render(doc).text

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _convert(self, root: Node) -> StyledDocument:
        """Convert ``root`` with an explicit post-order stack.

        Each node is visited twice: once to schedule its children and once,
        after all of them are converted, to hand their results to its handler.
        Tree depth is therefore limited by memory, not by the interpreter's
        recursion limit.

        Raises
        ------
        MalformedTreeError
            If a node is reached again while its own subtree is being converted

        """
        stack: list[tuple[Node, bool]] = [(root, False)]
        results: list[StyledDocument] = []
        open_nodes: set[int] = set()

        while stack:
            node, children_done = stack.pop()
            if children_done:
                count = len(node.children)
                child_results = results[len(results) - count :] if count else []
                del results[len(results) - count :]
                open_nodes.discard(id(node))
                handler = self._handlers.get(node.kind, self._convert_children)
                results.append(handler(node, child_results))
                continue

            if id(node) in open_nodes:
                raise MalformedTreeError(
                    "Document tree is cyclic: a node occurs inside its own subtree", node_kind=node.kind.value
                )
            open_nodes.add(id(node))
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))

        return results[0]

    def _convert_children(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        result = StyledDocument()
        for child_runs in children:
            result.extend(child_runs)
        return result

    # ------------------------------------------------------------------
    # Shared styles
    # ------------------------------------------------------------------

    def _base_attributes(self) -> StyleAttributes:
        return StyleAttributes(font_size=self.base_font_size)

    def _code_attributes(self) -> StyleAttributes:
        return StyleAttributes(
            font_size=self.base_font_size - CODE_FONT_SIZE_DELTA,
            font_family=FontFamily.MONOSPACE,
            foreground=ColorTag.TEXT,
            background=ColorTag.CODE_BACKGROUND,
        )

    def _separator(self, text: str) -> StyledRun:
        return StyledRun(text, self._base_attributes())

    def _list_layout(self, depth: int, marker_width: float) -> IndentLayout:
        return compute_indent_layout(
            depth=depth,
            base_margin=self.options.list_base_margin,
            depth_step=self.options.list_depth_step,
            marker_width=marker_width,
            gap=self.options.marker_gap,
        )

    # ------------------------------------------------------------------
    # Inline handlers
    # ------------------------------------------------------------------

    def _render_text(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        assert isinstance(node, Text)
        return StyledDocument([StyledRun(node.content, self._base_attributes())])

    def _render_emphasis(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        return self._convert_children(node, children).map_runs(StyleAttributes.with_italic)

    def _render_strong(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        return self._convert_children(node, children).map_runs(StyleAttributes.with_bold)

    def _render_strikethrough(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        return self._convert_children(node, children).map_runs(StyleAttributes.with_strikethrough)

    def _render_inline_code(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        assert isinstance(node, InlineCode)
        return StyledDocument([StyledRun(f" {node.code} ", self._code_attributes())])

    def _render_line_break(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        assert isinstance(node, LineBreak)
        return StyledDocument([self._separator(" " if node.soft else SINGLE_NEWLINE)])

    def _render_link(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        """Convert the link text and attach the resolved target.

        Entity routes become a synthetic mention URI plus a ``mention``
        attribute; unparsable destinations leave the link target unset.
        """
        assert isinstance(node, Link)
        resolved = resolve_link_destination(
            node.destination,
            route_prefix=self.options.mention_route_prefix,
            scheme=self.options.mention_scheme,
        )

        changes: dict[str, object] = {"foreground": ColorTag.LINK}
        if resolved.target is not None:
            changes["link"] = resolved.target
        if resolved.mention is not None:
            changes["mention"] = resolved.mention

        return self._convert_children(node, children).map_runs(lambda attrs: attrs.with_updates(**changes))

    def _render_image(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        """Produce exactly one run for an image.

        The run text is the alt text (U+FFFC when empty) in the style of its
        first run. A parseable source adds the image marker, a link target
        with the same URL and link coloring.
        """
        assert isinstance(node, Image)
        alt = self._convert_children(node, children)
        attributes = alt[0].attributes if len(alt) else self._base_attributes()

        if node.source is not None and is_valid_uri(node.source):
            attributes = attributes.with_updates(
                image=ImageMarker(url=node.source, title=node.title),
                link=node.source,
                foreground=ColorTag.LINK,
            )
        else:
            if node.source:
                logger.debug(f"Image source is not a valid URI, omitting marker: {node.source!r}")
            attributes = attributes.with_updates(image=None)

        if node.title:
            attributes = attributes.with_updates(image_title=node.title)

        return StyledDocument([StyledRun(alt.text or OBJECT_REPLACEMENT_CHAR, attributes)])

    # ------------------------------------------------------------------
    # Block handlers
    # ------------------------------------------------------------------

    def _render_paragraph(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        assert isinstance(node, Paragraph)
        result = self._convert_children(node, children)
        if node.has_successor:
            result.append(self._separator(SINGLE_NEWLINE if is_contained_in_list(node) else DOUBLE_NEWLINE))
        return result

    def _render_heading(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        assert isinstance(node, Heading)
        size = heading_font_size(node.level, self.base_font_size)
        result = self._convert_children(node, children).map_runs(lambda attrs: attrs.with_heading(size))
        if node.has_successor:
            result.append(self._separator(DOUBLE_NEWLINE))
        return result

    def _render_code_block(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        assert isinstance(node, CodeBlock)
        attributes = self._code_attributes().with_updates(paragraph=code_block_paragraph_style())
        result = StyledDocument([StyledRun(f"\n{node.code}\n", attributes)])
        if node.has_successor:
            result.append(self._separator(SINGLE_NEWLINE))
        return result

    def _render_list_item(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        result = self._convert_children(node, children)
        if node.has_successor:
            result.append(self._separator(SINGLE_NEWLINE))
        return result

    def _render_unordered_list(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        """Prefix each item with a bullet marker laid out for the list's depth."""
        assert isinstance(node, UnorderedList)
        depth = list_depth(node)
        bullet = self.options.bullet
        layout = self._list_layout(depth, self._metrics.bullet_width(bullet, self.base_font_size))
        marker_attributes = self._base_attributes().with_updates(
            paragraph=layout.list_paragraph_style(),
            list_depth=depth,
        )

        result = StyledDocument()
        for item, item_runs in zip(node.children, children):
            if item.kind is NodeKind.LIST_ITEM:
                result.append(StyledRun(f"{MARKER_TAB}{bullet}{MARKER_TAB}", marker_attributes))
            result.extend(item_runs)

        if node.has_successor:
            result.append(self._separator(DOUBLE_NEWLINE))
        return result

    def _render_ordered_list(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        """Prefix each item with its 1-based ordinal.

        The marker column is sized for the largest ordinal in the list so all
        markers share the same tab stops.
        """
        assert isinstance(node, OrderedList)
        depth = list_depth(node)
        marker_width = self._metrics.ordinal_width(len(node.children), self.base_font_size)
        layout = self._list_layout(depth, marker_width)
        marker_attributes = self._base_attributes().with_updates(
            font_family=FontFamily.MONOSPACED_DIGITS,
            paragraph=layout.list_paragraph_style(),
            list_depth=depth,
        )

        result = StyledDocument()
        ordinal = 0
        for item, item_runs in zip(node.children, children):
            if item.kind is NodeKind.LIST_ITEM:
                ordinal += 1
                result.append(StyledRun(f"{MARKER_TAB}{ordinal}.{MARKER_TAB}", marker_attributes))
            result.extend(item_runs)

        if node.has_successor:
            result.append(self._separator(SINGLE_NEWLINE if is_contained_in_list(node) else DOUBLE_NEWLINE))
        return result

    def _render_block_quote(self, node: Node, children: list[StyledDocument]) -> StyledDocument:
        """Prefix each quoted block with a bar marker and mute its text color.

        The muted foreground is applied after the child is converted, so it
        overrides colors chosen by the child (links, code).
        """
        assert isinstance(node, BlockQuote)
        depth = quote_depth(node)
        layout = self._list_layout(depth, self.options.quote_border_width)
        marker_attributes = self._base_attributes().with_updates(
            paragraph=layout.quote_paragraph_style(),
            quote_depth=depth,
            background=ColorTag.QUOTE_BACKGROUND,
        )

        result = StyledDocument()
        for child_runs in children:
            span = StyledDocument([StyledRun(MARKER_TAB, marker_attributes)])
            span.extend(child_runs)
            result.extend(span.map_runs(lambda attrs: attrs.with_updates(foreground=ColorTag.QUOTE_TEXT)))

        if node.has_successor:
            result.append(self._separator(DOUBLE_NEWLINE))
        return result


def markdown_to_runs(
    markdown_content: str,
    options: StyledRunOptions | None = None,
    unescape: bool = True,
) -> StyledDocument:
    r"""Convert a markdown string straight into styled runs.

    Parameters
    ----------
    markdown_content : str
        Markdown text
    options : StyledRunOptions or None, default = None
        Converter configuration
    unescape : bool, default True
        Rewrite literal ``\n`` sequences to newlines before parsing

    Returns
    -------
    StyledDocument
        Converted runs

    Examples
    --------
    >>> from md2runs.renderers.styled_runs import markdown_to_runs
    >>> markdown_to_runs("**bold** text").text
    'bold text'

    """
    return StyledRunRenderer(options).render_markdown(markdown_content, unescape=unescape)
