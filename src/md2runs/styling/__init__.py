#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/styling/__init__.py
"""Style model, styled runs and marker layout."""

from md2runs.styling.attributes import (
    ColorTag,
    FontFamily,
    FontSlant,
    FontWeight,
    ImageMarker,
    ParagraphStyle,
    StyleAttributes,
    TabStop,
)
from md2runs.styling.layout import FontMetrics, IndentLayout, code_block_paragraph_style, compute_indent_layout
from md2runs.styling.runs import StyledDocument, StyledRun

__all__ = [
    "ColorTag",
    "FontFamily",
    "FontSlant",
    "FontWeight",
    "ImageMarker",
    "ParagraphStyle",
    "StyleAttributes",
    "TabStop",
    "FontMetrics",
    "IndentLayout",
    "code_block_paragraph_style",
    "compute_indent_layout",
    "StyledDocument",
    "StyledRun",
]
