#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/styling/attributes.py
"""Value types describing the style of a text run.

Everything here is immutable. Style changes are expressed as union operations
(``with_bold``, ``with_italic``, ...) that return a new ``StyleAttributes``
with the trait added; no operation removes a trait that is already present,
so bold and italic compose regardless of the order they are applied in.

Color and font choices are semantic tags rather than concrete colors or font
objects: the display layer decides what "link" or "quote-text" looks like.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from md2runs.constants import TabAlignment


class FontFamily(str, Enum):
    """Semantic font family of a run."""

    SYSTEM = "system"
    MONOSPACE = "monospace"
    MONOSPACED_DIGITS = "monospaced_digits"


class FontWeight(str, Enum):
    """Font weight of a run."""

    REGULAR = "regular"
    BOLD = "bold"


class FontSlant(str, Enum):
    """Font slant of a run."""

    NORMAL = "normal"
    ITALIC = "italic"


class ColorTag(str, Enum):
    """Semantic color roles used for foreground and background attributes."""

    TEXT = "text"
    LINK = "link"
    CODE_BACKGROUND = "code-background"
    QUOTE_BACKGROUND = "quote-background"
    QUOTE_TEXT = "quote-text"


@dataclass(frozen=True)
class TabStop:
    """A tab stop at an absolute horizontal position.

    Parameters
    ----------
    location : float
        Distance from the leading edge of the text container, in points
    alignment : {"left", "right"}
        How text following the tab aligns against the stop

    """

    location: float
    alignment: TabAlignment = "left"


@dataclass(frozen=True)
class ParagraphStyle:
    """Paragraph-level layout attached to runs.

    Parameters
    ----------
    tab_stops : tuple of TabStop, default ()
        Tab stops in increasing order of location
    head_indent : float, default 0.0
        Indent of wrapped (non-first) lines
    first_line_head_indent : float, default 0.0
        Indent of the first line
    tail_indent : float, default 0.0
        Trailing indent; negative values are measured from the trailing margin
    line_spacing : float, default 0.0
        Extra space between lines
    paragraph_spacing : float, default 0.0
        Extra space after the paragraph

    """

    tab_stops: tuple[TabStop, ...] = ()
    head_indent: float = 0.0
    first_line_head_indent: float = 0.0
    tail_indent: float = 0.0
    line_spacing: float = 0.0
    paragraph_spacing: float = 0.0

    @property
    def first_tab_stop(self) -> Optional[float]:
        """Location of the first tab stop, if any."""
        return self.tab_stops[0].location if self.tab_stops else None

    @property
    def second_tab_stop(self) -> Optional[float]:
        """Location of the second tab stop, if any."""
        return self.tab_stops[1].location if len(self.tab_stops) > 1 else None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready representation."""
        return {
            "tab_stops": [{"location": t.location, "alignment": t.alignment} for t in self.tab_stops],
            "head_indent": self.head_indent,
            "first_line_head_indent": self.first_line_head_indent,
            "tail_indent": self.tail_indent,
            "line_spacing": self.line_spacing,
            "paragraph_spacing": self.paragraph_spacing,
        }


@dataclass(frozen=True)
class ImageMarker:
    """Marks a run as standing in for an image.

    Parameters
    ----------
    url : str
        Image source URL exactly as written in the document
    title : str or None, default None
        Optional image title

    """

    url: str
    title: Optional[str] = None


@dataclass(frozen=True)
class StyleAttributes:
    """Complete set of style attributes of one run.

    Parameters
    ----------
    font_size : float
        Point size
    font_family : FontFamily, default SYSTEM
    weight : FontWeight, default REGULAR
    slant : FontSlant, default NORMAL
    strikethrough : bool, default False
    foreground : ColorTag or None
        Foreground color role; None means the display default
    background : ColorTag or None
        Background color role; None means no background
    link : str or None
        Link target URI
    image : ImageMarker or None
        Image marker for runs produced from image nodes
    image_title : str or None
        Title of the image, when one was given
    mention : str or None
        Entity identifier of a mention link
    list_depth : int or None
        Nesting depth of the list a marker run belongs to
    quote_depth : int or None
        Nesting depth of the block quote a marker run belongs to
    paragraph : ParagraphStyle or None
        Paragraph layout (tab stops and indents)
    attachment : object or None
        Display attachment set by the image presenter; excluded from
        equality and hashing

    """

    font_size: float
    font_family: FontFamily = FontFamily.SYSTEM
    weight: FontWeight = FontWeight.REGULAR
    slant: FontSlant = FontSlant.NORMAL
    strikethrough: bool = False
    foreground: Optional[ColorTag] = None
    background: Optional[ColorTag] = None
    link: Optional[str] = None
    image: Optional[ImageMarker] = None
    image_title: Optional[str] = None
    mention: Optional[str] = None
    list_depth: Optional[int] = None
    quote_depth: Optional[int] = None
    paragraph: Optional[ParagraphStyle] = None
    attachment: Any = field(default=None, compare=False)

    @property
    def is_bold(self) -> bool:
        return self.weight is FontWeight.BOLD

    @property
    def is_italic(self) -> bool:
        return self.slant is FontSlant.ITALIC

    def with_bold(self) -> StyleAttributes:
        """Return a copy with bold weight added."""
        return replace(self, weight=FontWeight.BOLD)

    def with_italic(self) -> StyleAttributes:
        """Return a copy with italic slant added."""
        return replace(self, slant=FontSlant.ITALIC)

    def with_strikethrough(self) -> StyleAttributes:
        """Return a copy with strikethrough added."""
        return replace(self, strikethrough=True)

    def with_heading(self, font_size: float) -> StyleAttributes:
        """Return a copy with bold weight added and the size set to ``font_size``.

        Existing traits (italic, strikethrough, link, ...) are kept.
        """
        return replace(self, weight=FontWeight.BOLD, font_size=font_size)

    def with_updates(self, **changes: Any) -> StyleAttributes:
        """Return a copy with arbitrary attributes set."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready representation, omitting unset optional attributes."""
        data: dict[str, Any] = {
            "font_size": self.font_size,
            "font_family": self.font_family.value,
            "weight": self.weight.value,
            "slant": self.slant.value,
        }
        if self.strikethrough:
            data["strikethrough"] = True
        if self.foreground is not None:
            data["foreground"] = self.foreground.value
        if self.background is not None:
            data["background"] = self.background.value
        if self.link is not None:
            data["link"] = self.link
        if self.image is not None:
            data["image"] = {"url": self.image.url, "title": self.image.title}
        for name in ("image_title", "mention", "list_depth", "quote_depth"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        if self.paragraph is not None:
            data["paragraph"] = self.paragraph.to_dict()
        if self.attachment is not None:
            describe = getattr(self.attachment, "to_dict", None)
            data["attachment"] = describe() if callable(describe) else repr(self.attachment)
        return data
