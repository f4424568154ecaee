#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/options/converter.py
"""Configuration options for converting document trees into styled runs."""

from __future__ import annotations

from dataclasses import dataclass, field

from md2runs.constants import (
    BULLET_GLYPH,
    DEFAULT_BASE_FONT_SIZE,
    DEFAULT_BODY_FONT,
    DEFAULT_LIST_BASE_MARGIN,
    DEFAULT_LIST_DEPTH_STEP,
    DEFAULT_MARKER_GAP,
    DEFAULT_MENTION_ROUTE_PREFIX,
    DEFAULT_MENTION_SCHEME,
    DEFAULT_MONOSPACE_FONT,
    DEFAULT_NUMERAL_FONT,
    DEFAULT_QUOTE_BORDER_WIDTH,
)
from md2runs.options.base import CloneFrozenMixin


@dataclass(frozen=True)
class StyledRunOptions(CloneFrozenMixin):
    """Configuration options for the styled-run converter.

    Parameters
    ----------
    base_font_size : float, default 15.0
        Body text size. Heading, code and marker sizes are derived from it.
    list_base_margin : float, default 15.0
        Left margin of root-level list and quote markers.
    list_depth_step : float, default 20.0
        Additional left offset per level of nesting.
    marker_gap : float, default 8.0
        Distance between the marker column and the content column.
    quote_border_width : float, default 4.0
        Width reserved for the quote bar marker.
    bullet : str, default "•"
        Glyph used for unordered list markers.
    body_font : str, default "Helvetica"
        Font face used to measure body-text markers.
    monospace_font : str, default "Courier"
        Font face used to measure code.
    numeral_font : str, default "Courier"
        Fixed-width face used to measure and label ordered-list numerals.
    mention_route_prefix : str, default "/user/"
        Link destinations starting with this prefix are treated as entity
        mentions. Set to an empty string to disable mention detection.
    mention_scheme : str, default "mention"
        URI scheme of the synthetic link target built for entity mentions.

    """

    base_font_size: float = field(
        default=DEFAULT_BASE_FONT_SIZE,
        metadata={"help": "Base font size for body text", "type": float, "importance": "core"},
    )
    list_base_margin: float = field(
        default=DEFAULT_LIST_BASE_MARGIN,
        metadata={"help": "Left margin for root-level list and quote markers", "type": float, "importance": "advanced"},
    )
    list_depth_step: float = field(
        default=DEFAULT_LIST_DEPTH_STEP,
        metadata={"help": "Additional indent per nesting level", "type": float, "importance": "advanced"},
    )
    marker_gap: float = field(
        default=DEFAULT_MARKER_GAP,
        metadata={"help": "Gap between marker column and content column", "type": float, "importance": "advanced"},
    )
    quote_border_width: float = field(
        default=DEFAULT_QUOTE_BORDER_WIDTH,
        metadata={"help": "Width reserved for the quote bar", "type": float, "importance": "advanced"},
    )
    bullet: str = field(
        default=BULLET_GLYPH,
        metadata={"help": "Glyph used for unordered list markers", "importance": "advanced"},
    )
    body_font: str = field(
        default=DEFAULT_BODY_FONT,
        metadata={"help": "Font face used to measure body-text markers", "importance": "advanced"},
    )
    monospace_font: str = field(
        default=DEFAULT_MONOSPACE_FONT,
        metadata={"help": "Font face used for code", "importance": "advanced"},
    )
    numeral_font: str = field(
        default=DEFAULT_NUMERAL_FONT,
        metadata={"help": "Fixed-width face used for ordered-list numerals", "importance": "advanced"},
    )
    mention_route_prefix: str = field(
        default=DEFAULT_MENTION_ROUTE_PREFIX,
        metadata={"help": "Link path prefix that marks an entity mention", "importance": "core"},
    )
    mention_scheme: str = field(
        default=DEFAULT_MENTION_SCHEME,
        metadata={"help": "URI scheme for synthetic mention link targets", "importance": "core"},
    )

    def __post_init__(self) -> None:
        """Validate numeric ranges for converter options.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        if self.base_font_size <= 1:
            raise ValueError(f"base_font_size must be greater than 1, got {self.base_font_size}")

        for name in ("list_base_margin", "list_depth_step", "marker_gap", "quote_border_width"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        if not self.bullet:
            raise ValueError("bullet must be a non-empty string")

        if not self.mention_scheme or not self.mention_scheme.isascii() or not self.mention_scheme[0].isalpha():
            raise ValueError(f"mention_scheme must be an ASCII scheme name, got {self.mention_scheme!r}")
