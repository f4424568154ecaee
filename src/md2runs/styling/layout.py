#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/styling/layout.py
"""Indentation layout for list and quote markers.

Markers are laid out on two tab stops: a right-aligned stop that closes the
marker column, and a left-aligned stop where the content starts. Wrapped
lines are indented to the content stop so they align under the text rather
than under the marker.

::

    |<- left_offset ->|<- marker ->|<- gap ->|
                                  1.         Item text that wraps
                                             onto a second line
                                  ^ first_tab_stop (right)
                                             ^ second_tab_stop (left)

Marker widths are measured with reportlab's Type-1 font metrics, the same
metrics the glyphs are labelled with in the run attributes, and rounded up
to whole points.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache

from md2runs.constants import (
    CODE_BLOCK_INDENT,
    CODE_BLOCK_LINE_SPACING,
    CODE_BLOCK_PARAGRAPH_SPACING,
    DEFAULT_QUOTE_PARAGRAPH_SPACING,
    DEPS_FONT_METRICS,
)
from md2runs.exceptions import ValidationError
from md2runs.styling.attributes import ParagraphStyle, TabStop
from md2runs.utils.decorators import requires_dependencies


@dataclass(frozen=True)
class IndentLayout:
    """Computed marker geometry for one list item or quoted block.

    Parameters
    ----------
    left_offset : float
        Leading edge of the marker column
    first_tab_stop : float
        Right edge of the marker column (right-aligned tab)
    second_tab_stop : float
        Start of the content column (left-aligned tab)
    head_indent : float
        Indent of wrapped lines

    """

    left_offset: float
    first_tab_stop: float
    second_tab_stop: float
    head_indent: float

    def list_paragraph_style(self) -> ParagraphStyle:
        """Paragraph style for a list item: right-aligned marker, left-aligned content."""
        return ParagraphStyle(
            tab_stops=(
                TabStop(self.first_tab_stop, "right"),
                TabStop(self.second_tab_stop, "left"),
            ),
            head_indent=self.head_indent,
        )

    def quote_paragraph_style(self, paragraph_spacing: float = DEFAULT_QUOTE_PARAGRAPH_SPACING) -> ParagraphStyle:
        """Paragraph style for quoted content.

        The quote bar is a single tab ending at the first stop; both the first
        and the wrapped lines start at the content stop.
        """
        return ParagraphStyle(
            tab_stops=(TabStop(self.first_tab_stop, "left"),),
            head_indent=self.head_indent,
            first_line_head_indent=self.head_indent,
            paragraph_spacing=paragraph_spacing,
        )


def compute_indent_layout(
    depth: int,
    base_margin: float,
    depth_step: float,
    marker_width: float,
    gap: float,
) -> IndentLayout:
    """Compute marker tab stops for a given nesting depth.

    Parameters
    ----------
    depth : int
        Nesting depth (0 for root-level containers)
    base_margin : float
        Left margin at depth 0
    depth_step : float
        Additional offset per depth level
    marker_width : float
        Width of the widest marker in the container
    gap : float
        Space between marker column and content

    Returns
    -------
    IndentLayout
        Offsets satisfying ``first = left + marker_width``, ``second = first + gap``
        and ``head_indent = second``

    Raises
    ------
    ValidationError
        If ``depth`` is negative

    """
    if depth < 0:
        raise ValidationError(f"depth must be non-negative, got {depth}", parameter_name="depth", parameter_value=depth)

    left_offset = base_margin + depth_step * depth
    first_tab_stop = left_offset + marker_width
    second_tab_stop = first_tab_stop + gap
    return IndentLayout(
        left_offset=left_offset,
        first_tab_stop=first_tab_stop,
        second_tab_stop=second_tab_stop,
        head_indent=second_tab_stop,
    )


def code_block_paragraph_style() -> ParagraphStyle:
    """Paragraph style for fenced and indented code blocks."""
    return ParagraphStyle(
        head_indent=CODE_BLOCK_INDENT,
        first_line_head_indent=CODE_BLOCK_INDENT,
        tail_indent=-CODE_BLOCK_INDENT,
        line_spacing=CODE_BLOCK_LINE_SPACING,
        paragraph_spacing=CODE_BLOCK_PARAGRAPH_SPACING,
    )


@lru_cache(maxsize=512)
def _string_width(text: str, font_name: str, font_size: float) -> float:
    from reportlab.pdfbase import pdfmetrics

    return pdfmetrics.stringWidth(text, font_name, font_size)


class FontMetrics:
    """Measure marker glyphs with reportlab's standard font metrics.

    Parameters
    ----------
    body_font : str
        Face used for bullets and body-text markers (e.g., "Helvetica")
    numeral_font : str
        Fixed-width face used for ordered-list numerals (e.g., "Courier")

    """

    def __init__(self, body_font: str, numeral_font: str):
        self.body_font = body_font
        self.numeral_font = numeral_font

    @requires_dependencies("font_metrics", DEPS_FONT_METRICS)
    def measure(self, text: str, font_name: str, font_size: float) -> float:
        """Return the width of ``text`` in points, rounded up.

        Raises
        ------
        ValidationError
            If ``font_name`` is not a font reportlab knows about

        """
        try:
            width = _string_width(text, font_name, float(font_size))
        except (KeyError, ValueError) as e:
            raise ValidationError(
                f"Unknown font for marker measurement: {font_name!r}",
                parameter_name="font_name",
                parameter_value=font_name,
                original_error=e,
            ) from e
        return float(math.ceil(width))

    def bullet_width(self, bullet: str, font_size: float) -> float:
        """Width of a bullet glyph in the body face."""
        return self.measure(bullet, self.body_font, font_size)

    def ordinal_width(self, item_count: int, font_size: float) -> float:
        """Width of the widest ordinal label (``"{item_count}."``) in the numeral face.

        Measuring the largest label keeps every marker of a list on one tab
        column.
        """
        return self.measure(f"{max(item_count, 1)}.", self.numeral_font, font_size)
