#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/parsers/__init__.py
"""Markdown parsing into the md2runs document tree."""

from md2runs.parsers.markdown import MarkdownParser, markdown_to_ast, unescape_newlines

__all__ = ["MarkdownParser", "markdown_to_ast", "unescape_newlines"]
