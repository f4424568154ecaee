#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/parsers/markdown.py
"""Markdown to document tree parser.

This module builds the node tree consumed by the styled-run converter from
markdown text, using mistune's token stream. Blank-line tokens are skipped so
that sibling positions (and therefore separator placement) reflect only real
blocks.

"""

from __future__ import annotations

import html
import logging
from typing import Any

from md2runs.ast import (
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
    OrderedList,
    Paragraph,
    Strikethrough,
    Strong,
    Text,
    ThematicBreak,
    UnorderedList,
)
from md2runs.constants import DEPS_MARKDOWN
from md2runs.utils.decorators import debug_timer, requires_dependencies

logger = logging.getLogger(__name__)

ESCAPED_NEWLINE = "\\n"


def unescape_newlines(text: str) -> str:
    r"""Replace literal ``\n`` sequences with real newlines.

    Markdown delivered inside JSON payloads often arrives with newlines
    escaped as the two characters ``\`` and ``n``. This is a plain string
    substitution applied once, before parsing.

    Parameters
    ----------
    text : str
        Raw markdown text

    Returns
    -------
    str
        Text with every ``\n`` escape turned into a newline

    Examples
    --------
        >>> unescape_newlines("First line\\nSecond line")
        'First line\nSecond line'

    """
    return text.replace(ESCAPED_NEWLINE, "\n")


class MarkdownParser:
    r"""Parse markdown text into a linked document tree.

    Uses mistune with the strikethrough plugin and maps its tokens onto
    ``md2runs.ast`` nodes. Every node in the returned tree has its ``parent``
    and ``index_in_parent`` set.

    Examples
    --------
        >>> parser = MarkdownParser()
        >>> doc = parser.parse("# Hello\n\nThis is **bold**.")
        >>> [child.kind.value for child in doc.children]
        ['heading', 'paragraph']

    """

    plugins: tuple[str, ...] = ("strikethrough",)

    @requires_dependencies("markdown", DEPS_MARKDOWN)
    def parse(self, markdown_content: str) -> Document:
        """Parse markdown text into a Document.

        Parameters
        ----------
        markdown_content : str
            Markdown source

        Returns
        -------
        Document
            Root of the linked node tree

        """
        import mistune

        markdown = mistune.create_markdown(plugins=list(self.plugins), renderer=None)

        with debug_timer(logger, "Markdown parsing"):
            tokens, _state = markdown.parse(markdown_content)

        children = self._process_tokens(tokens) if isinstance(tokens, list) else []
        logger.debug(f"Parsed {len(children)} top-level blocks")
        return Document(children=children)

    def _process_tokens(self, tokens: list[dict[str, Any]]) -> list[Node]:
        """Process a list of block tokens into nodes."""
        nodes: list[Node] = []
        for token in tokens:
            node = self._process_token(token)
            if node is not None:
                nodes.append(node)
        return nodes

    def _process_token(self, token: dict[str, Any]) -> Node | None:
        """Process a single block token.

        Parameters
        ----------
        token : dict
            Mistune token dictionary with 'type' and other fields

        Returns
        -------
        Node or None
            Resulting node, or None for tokens that produce no block

        """
        token_type = token.get("type", "")

        if token_type == "heading":
            return self._process_heading(token)
        elif token_type in ("paragraph", "block_text"):
            # block_text is used for tight list items - treat like paragraph
            return Paragraph(children=self._process_inline_tokens(token.get("children", [])))
        elif token_type == "block_code":
            return self._process_code_block(token)
        elif token_type == "block_quote":
            return BlockQuote(children=self._process_tokens(token.get("children", [])))
        elif token_type == "list":
            return self._process_list(token)
        elif token_type == "thematic_break":
            return ThematicBreak()
        elif token_type == "block_html":
            return HTMLBlock(content=token.get("raw", ""))

        # blank_line and anything unknown
        return None

    def _process_heading(self, token: dict[str, Any]) -> Heading:
        """Process heading token (ATX and setext)."""
        attrs = token.get("attrs", {})
        level = attrs.get("level", 1) if isinstance(attrs, dict) else 1

        if not isinstance(level, int) or level < 1 or level > 6:
            level = 1

        return Heading(level=level, children=self._process_inline_tokens(token.get("children", [])))

    def _process_code_block(self, token: dict[str, Any]) -> CodeBlock:
        """Process code block token.

        The code is kept exactly as mistune reports it, including its trailing
        newline; only the first word of the info string is kept as language.
        """
        attrs = token.get("attrs", {})
        info_string = attrs.get("info") if isinstance(attrs, dict) else None
        language = info_string.strip().split(maxsplit=1)[0] if info_string and info_string.strip() else None
        return CodeBlock(code=token.get("raw", ""), language=language)

    def _process_list(self, token: dict[str, Any]) -> UnorderedList | OrderedList:
        """Process list token into an ordered or unordered list."""
        attrs = token.get("attrs", {})
        if not isinstance(attrs, dict):
            attrs = {}

        children = token.get("children", [])
        if not isinstance(children, list):
            children = []

        items = [
            ListItem(children=self._process_tokens(child.get("children", [])))
            for child in children
            if isinstance(child, dict) and child.get("type") == "list_item"
        ]
        tight = token.get("tight", attrs.get("tight", True))

        if attrs.get("ordered", False):
            return OrderedList(children=items, start=attrs.get("start", 1), tight=tight)
        return UnorderedList(children=items, tight=tight)

    def _process_inline_tokens(self, tokens: list[dict[str, Any]]) -> list[Node]:
        """Process inline tokens into nodes."""
        nodes: list[Node] = []
        for token in tokens:
            node = self._process_inline_token(token)
            if node is not None:
                nodes.append(node)
        return nodes

    def _handle_text_token(self, token: dict[str, Any]) -> Text:
        return Text(content=_decode_references(token.get("raw", "")))

    def _handle_strong_token(self, token: dict[str, Any]) -> Strong:
        return Strong(children=self._process_inline_tokens(token.get("children", [])))

    def _handle_emphasis_token(self, token: dict[str, Any]) -> Emphasis:
        return Emphasis(children=self._process_inline_tokens(token.get("children", [])))

    def _handle_strikethrough_token(self, token: dict[str, Any]) -> Strikethrough:
        return Strikethrough(children=self._process_inline_tokens(token.get("children", [])))

    def _handle_codespan_token(self, token: dict[str, Any]) -> InlineCode:
        return InlineCode(code=token.get("raw", ""))

    def _handle_link_token(self, token: dict[str, Any]) -> Link:
        """Handle link token."""
        attrs = token.get("attrs", {})
        if not isinstance(attrs, dict):
            attrs = {}
        title = attrs.get("title")
        return Link(
            destination=attrs.get("url"),
            children=self._process_inline_tokens(token.get("children", [])),
            title=html.unescape(title) if title else None,
        )

    def _handle_image_token(self, token: dict[str, Any]) -> Image:
        """Handle image token; alt text is flattened to one Text child."""
        attrs = token.get("attrs", {})
        if not isinstance(attrs, dict):
            attrs = {}
        title = attrs.get("title")
        alt_text = _flatten_token_text(token.get("children", []))
        return Image(
            source=attrs.get("url"),
            title=html.unescape(title) if title else None,
            children=[Text(content=alt_text)] if alt_text else [],
        )

    def _handle_linebreak_token(self, token: dict[str, Any]) -> LineBreak:
        return LineBreak(soft=False)

    def _handle_softbreak_token(self, token: dict[str, Any]) -> LineBreak:
        return LineBreak(soft=True)

    def _handle_inline_html_token(self, token: dict[str, Any]) -> HTMLInline:
        return HTMLInline(content=token.get("raw", ""))

    def _process_inline_token(self, token: dict[str, Any]) -> Node | None:
        """Process a single inline token.

        Parameters
        ----------
        token : dict
            Inline token dictionary

        Returns
        -------
        Node or None
            Inline node, or None for unknown token types

        """
        token_type = token.get("type", "")

        handler_map: dict[str, Any] = {
            "text": self._handle_text_token,
            "strong": self._handle_strong_token,
            "emphasis": self._handle_emphasis_token,
            "strikethrough": self._handle_strikethrough_token,
            "codespan": self._handle_codespan_token,
            "link": self._handle_link_token,
            "image": self._handle_image_token,
            "linebreak": self._handle_linebreak_token,
            "softbreak": self._handle_softbreak_token,
            "inline_html": self._handle_inline_html_token,
        }

        handler = handler_map.get(token_type)
        if handler:
            return handler(token)
        logger.debug(f"Skipping unsupported inline token: {token_type!r}")
        return None


def _decode_references(text: str) -> str:
    """Decode character references left encoded in mistune text tokens.

    mistune's helper follows CommonMark: named references need their trailing
    semicolon, so ``&copy 2025`` is kept as written.
    """
    from mistune.util import unescape

    return unescape(text)


def _flatten_token_text(tokens: list[dict[str, Any]]) -> str:
    """Concatenate the plain text of an inline token subtree."""
    parts: list[str] = []
    stack = list(reversed(tokens))
    while stack:
        token = stack.pop()
        if not isinstance(token, dict):
            continue
        token_type = token.get("type")
        if token_type == "text":
            parts.append(_decode_references(token.get("raw", "")))
        elif token_type == "codespan":
            parts.append(token.get("raw", ""))
        elif token_type in ("softbreak", "linebreak"):
            parts.append(" ")
        stack.extend(reversed(token.get("children", []) or []))
    return "".join(parts)


def markdown_to_ast(markdown_content: str, unescape: bool = True) -> Document:
    r"""Convert a markdown string to a linked document tree.

    Parameters
    ----------
    markdown_content : str
        Markdown text to parse
    unescape : bool, default True
        Rewrite literal ``\n`` sequences to newlines before parsing

    Returns
    -------
    Document
        Root of the node tree

    Examples
    --------
    >>> from md2runs.parsers.markdown import markdown_to_ast
    >>> doc = markdown_to_ast("# Hello\\n\\nWorld")
    >>> len(doc.children)
    2

    """
    if unescape:
        markdown_content = unescape_newlines(markdown_content)
    return MarkdownParser().parse(markdown_content)
