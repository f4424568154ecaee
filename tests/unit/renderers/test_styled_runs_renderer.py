#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the styled-run renderer.

Expected tab stops use the default layout: a 15pt base margin, a 20pt step
per nesting level and an 8pt gap. Markers measure 6pt for the Helvetica
bullet, 18pt for one-digit Courier ordinals and 4pt for the quote bar.
"""

import pytest

from md2runs.ast import (
    BlockQuote,
    CodeBlock,
    Document,
    Emphasis,
    Heading,
    HTMLInline,
    Image,
    InlineCode,
    LineBreak,
    Link,
    ListItem,
    NodeKind,
    OrderedList,
    Paragraph,
    Strikethrough,
    Strong,
    Text,
    ThematicBreak,
    UnorderedList,
)
from md2runs.constants import OBJECT_REPLACEMENT_CHAR
from md2runs.exceptions import InvalidOptionsError, MalformedTreeError
from md2runs.options import ImageCacheOptions, StyledRunOptions
from md2runs.renderers import StyledRunRenderer, heading_font_size, markdown_to_runs
from md2runs.styling import ColorTag, FontFamily, StyleAttributes, TabStop, code_block_paragraph_style


def para(*texts: str) -> Paragraph:
    return Paragraph(children=[Text(content=t) for t in texts])


def render(*blocks) -> "list":
    return list(StyledRunRenderer().render(Document(children=list(blocks))))


@pytest.mark.unit
class TestRendererSetup:
    """Tests for construction and dispatch."""

    def test_dispatch_covers_every_kind(self) -> None:
        """Every node kind has a handler."""
        renderer = StyledRunRenderer()
        assert set(renderer._handlers) == set(NodeKind)

    def test_rejects_wrong_options_type(self) -> None:
        """Passing another component's options is an error."""
        with pytest.raises(InvalidOptionsError):
            StyledRunRenderer(ImageCacheOptions())  # type: ignore[arg-type]

    def test_renderer_is_reusable(self) -> None:
        """One renderer converts independent trees with identical results."""
        renderer = StyledRunRenderer()
        first = renderer.render(Document(children=[para("same")]))
        second = renderer.render(Document(children=[para("same")]))
        assert first == second

    def test_empty_document(self) -> None:
        """An empty document produces no runs."""
        assert len(StyledRunRenderer().render(Document())) == 0

    def test_cyclic_tree_raises(self) -> None:
        """A child cycle is reported as a malformed tree."""
        looping = Paragraph()
        looping.children.append(looping)
        with pytest.raises(MalformedTreeError):
            StyledRunRenderer().render(Document(children=[looping]))

    def test_deep_inline_nesting(self) -> None:
        """Inline nesting far beyond the interpreter recursion limit converts normally."""
        node = Text(content="deep")
        for _ in range(5000):
            node = Emphasis(children=[node])
        runs = render(Paragraph(children=[node]))
        assert [run.text for run in runs] == ["deep"]
        assert runs[0].attributes.is_italic

    def test_deep_quote_nesting(self) -> None:
        """Each of many nested quotes contributes one bar marker."""
        node = para("inner")
        for _ in range(1500):
            node = BlockQuote(children=[node])
        runs = render(node)
        assert len(runs) == 1501
        assert runs[-1].text == "inner"
        assert runs[-2].attributes.quote_depth == 1499


@pytest.mark.unit
class TestInlineRendering:
    """Tests for inline nodes."""

    def test_plain_text(self) -> None:
        """Text uses the base attributes."""
        runs = render(para("Hello"))
        assert len(runs) == 1
        assert runs[0].text == "Hello"
        assert runs[0].attributes == StyleAttributes(font_size=15.0)

    def test_bold_italic_nesting_order_irrelevant(self) -> None:
        """Strong inside emphasis equals emphasis inside strong."""
        a = render(Paragraph(children=[Strong(children=[Emphasis(children=[Text(content="x")])])]))
        b = render(Paragraph(children=[Emphasis(children=[Strong(children=[Text(content="x")])])]))
        assert a[0].attributes == b[0].attributes
        assert a[0].attributes.is_bold and a[0].attributes.is_italic

    def test_strikethrough(self) -> None:
        """Strikethrough is added to every descendant run."""
        runs = render(Paragraph(children=[Strikethrough(children=[Text(content="a"), Strong(children=[Text(content="b")])])]))
        assert all(run.attributes.strikethrough for run in runs)
        assert runs[1].attributes.is_bold

    def test_inline_code(self) -> None:
        """Inline code is padded with spaces and drawn monospace on a code background."""
        runs = render(Paragraph(children=[InlineCode(code="x = 1")]))
        assert runs[0].text == " x = 1 "
        attrs = runs[0].attributes
        assert attrs.font_family is FontFamily.MONOSPACE
        assert attrs.font_size == 14.0
        assert attrs.foreground is ColorTag.TEXT
        assert attrs.background is ColorTag.CODE_BACKGROUND

    def test_line_breaks(self) -> None:
        """Soft breaks become spaces and hard breaks newlines."""
        soft = render(Paragraph(children=[Text(content="a"), LineBreak(soft=True), Text(content="b")]))
        hard = render(Paragraph(children=[Text(content="a"), LineBreak(), Text(content="b")]))
        assert "".join(r.text for r in soft) == "a b"
        assert "".join(r.text for r in hard) == "a\nb"

    def test_html_inline_contributes_nothing(self) -> None:
        """Raw inline HTML has no text runs of its own."""
        runs = render(Paragraph(children=[Text(content="a"), HTMLInline(content="<br>")]))
        assert [r.text for r in runs] == ["a"]


@pytest.mark.unit
class TestLinkRendering:
    """Tests for link targets and mentions."""

    def test_plain_link(self) -> None:
        """Valid destinations are attached verbatim with link coloring."""
        runs = render(Paragraph(children=[Link(destination="https://example.com", children=[Text(content="site")])]))
        assert runs[0].attributes.link == "https://example.com"
        assert runs[0].attributes.foreground is ColorTag.LINK
        assert runs[0].attributes.mention is None

    def test_mention_link(self) -> None:
        """Entity routes become mention URIs with a mention attribute."""
        runs = render(
            Paragraph(children=[Link(destination="/user/664c2f2a?profile-tab=profile", children=[Text(content="Ada")])])
        )
        assert runs[0].attributes.link == "mention://664c2f2a"
        assert runs[0].attributes.mention == "664c2f2a"

    def test_custom_mention_route(self) -> None:
        """The mention prefix and scheme are configurable."""
        options = StyledRunOptions(mention_route_prefix="/people/", mention_scheme="entity")
        doc = Document(children=[Paragraph(children=[Link(destination="/people/7", children=[Text(content="Bo")])])])
        run = StyledRunRenderer(options).render(doc)[0]
        assert run.attributes.link == "entity://7"
        assert run.attributes.mention == "7"

    @pytest.mark.parametrize("destination", [None, "", "http://exa mple.com", "http://[::1"])
    def test_unusable_destination_keeps_text(self, destination) -> None:
        """Unparsable destinations omit the link target but keep the text."""
        runs = render(Paragraph(children=[Link(destination=destination, children=[Text(content="txt")])]))
        assert runs[0].text == "txt"
        assert runs[0].attributes.link is None
        assert runs[0].attributes.foreground is ColorTag.LINK

    def test_link_styles_compose(self) -> None:
        """Bold link text keeps both the link and the weight."""
        runs = render(
            Paragraph(
                children=[
                    Strong(children=[Link(destination="https://example.com", children=[Text(content="b")])])
                ]
            )
        )
        assert runs[0].attributes.is_bold
        assert runs[0].attributes.link == "https://example.com"


@pytest.mark.unit
class TestImageRendering:
    """Tests for image marker runs."""

    def test_image_with_alt_and_title(self) -> None:
        """Images produce exactly one run carrying the marker and link."""
        image = Image(source="https://example.com/a.png", title="A", children=[Text(content="alt")])
        runs = render(Paragraph(children=[image]))
        assert len(runs) == 1
        attrs = runs[0].attributes
        assert runs[0].text == "alt"
        assert attrs.image.url == "https://example.com/a.png"
        assert attrs.image.title == "A"
        assert attrs.image_title == "A"
        assert attrs.link == "https://example.com/a.png"
        assert attrs.foreground is ColorTag.LINK

    def test_image_without_alt(self) -> None:
        """An empty alt text is replaced by the object replacement character."""
        runs = render(Paragraph(children=[Image(source="https://example.com/a.png")]))
        assert [r.text for r in runs] == [OBJECT_REPLACEMENT_CHAR]
        assert runs[0].attributes.image is not None

    def test_image_with_invalid_source(self) -> None:
        """Invalid sources omit the marker and link but keep the text."""
        runs = render(Paragraph(children=[Image(source="bad url", children=[Text(content="alt")])]))
        assert runs[0].text == "alt"
        assert runs[0].attributes.image is None
        assert runs[0].attributes.link is None

    def test_image_inherits_enclosing_style(self) -> None:
        """An image inside strong text is bold."""
        image = Image(source="https://example.com/a.png", children=[Text(content="alt")])
        runs = render(Paragraph(children=[Strong(children=[image])]))
        assert runs[0].attributes.is_bold
        assert runs[0].attributes.image is not None


@pytest.mark.unit
class TestBlockRendering:
    """Tests for block nodes and separators."""

    def test_paragraph_separator(self) -> None:
        """Top-level paragraphs are separated by a blank line in base style."""
        runs = render(para("One"), para("Two"))
        assert [r.text for r in runs] == ["One", "\n\n", "Two"]
        assert runs[1].attributes == StyleAttributes(font_size=15.0)

    def test_no_trailing_separator(self) -> None:
        """The last block emits no separator."""
        runs = render(Heading(level=1, children=[Text(content="T")]))
        assert [r.text for r in runs] == ["T"]

    @pytest.mark.parametrize("level,size", [(1, 26.0), (2, 24.0), (6, 16.0)])
    def test_heading_sizes(self, level: int, size: float) -> None:
        """Heading sizes follow 28 - 2 * level at a 15pt base."""
        runs = render(Heading(level=level, children=[Text(content="H")]), para("body"))
        assert runs[0].attributes.font_size == size
        assert runs[0].attributes.is_bold
        assert runs[1].text == "\n\n"

    def test_heading_scales_with_base(self) -> None:
        """Heading sizes scale with the base font size."""
        assert heading_font_size(1, 30.0) == 52.0
        assert heading_font_size(3, 15.0) == 22.0

    def test_code_block(self) -> None:
        """Code blocks are wrapped in newlines and inset, followed by one newline."""
        runs = render(CodeBlock(code="x = 1"), para("after"))
        assert runs[0].text == "\nx = 1\n"
        assert runs[0].attributes.paragraph == code_block_paragraph_style()
        assert runs[0].attributes.font_family is FontFamily.MONOSPACE
        assert runs[1].text == "\n"

    def test_thematic_break_is_silent(self) -> None:
        """Thematic breaks produce no text."""
        runs = render(para("a"), ThematicBreak(), para("b"))
        assert "".join(r.text for r in runs) == "a\n\nb"


@pytest.mark.unit
class TestListRendering:
    """Tests for list markers and layout."""

    def test_unordered_list(self) -> None:
        """Bullets are tab-wrapped and items separated by one newline."""
        lst = UnorderedList(children=[ListItem(children=[para("a")]), ListItem(children=[para("b")])])
        runs = render(lst)
        assert [r.text for r in runs] == ["\t•\t", "a", "\n", "\t•\t", "b"]
        marker = runs[0].attributes
        assert marker.list_depth == 0
        assert marker.paragraph.tab_stops == (TabStop(21.0, "right"), TabStop(29.0, "left"))
        assert marker.paragraph.head_indent == 29.0

    def test_ordered_list(self) -> None:
        """Ordinals start at 1 and use monospaced digits."""
        lst = OrderedList(
            start=5, children=[ListItem(children=[para("a")]), ListItem(children=[para("b")])]
        )
        runs = render(lst)
        assert [r.text for r in runs] == ["\t1.\t", "a", "\n", "\t2.\t", "b"]
        marker = runs[0].attributes
        assert marker.font_family is FontFamily.MONOSPACED_DIGITS
        assert marker.paragraph.first_tab_stop == 33.0
        assert marker.paragraph.second_tab_stop == 41.0
        assert runs[3].attributes == marker

    def test_ten_items_share_wider_column(self) -> None:
        """A ten-item list sizes every marker for "10."."""
        lst = OrderedList(children=[ListItem(children=[para(str(i))]) for i in range(10)])
        runs = render(lst)
        markers = [r for r in runs if r.attributes.list_depth is not None]
        assert len(markers) == 10
        assert {m.attributes.paragraph.first_tab_stop for m in markers} == {42.0}

    def test_nested_list(self) -> None:
        """Nested lists are indented one step and separated by single newlines."""
        inner = OrderedList(children=[ListItem(children=[para("b")])])
        outer = UnorderedList(children=[ListItem(children=[para("a"), inner])])
        runs = render(outer)
        assert "".join(r.text for r in runs) == "\t•\ta\n\t1.\tb"
        inner_marker = runs[3].attributes
        assert inner_marker.list_depth == 1
        assert inner_marker.paragraph.first_tab_stop == 53.0

    def test_nested_ordered_list_followed_by_block(self) -> None:
        """An ordered list nested in an item is followed by one newline."""
        inner = OrderedList(children=[ListItem(children=[para("b")])])
        outer = UnorderedList(children=[ListItem(children=[para("a"), inner, para("c")])])
        text = "".join(r.text for r in render(outer))
        assert text == "\t•\ta\n\t1.\tb\nc"

    def test_list_followed_by_paragraph(self) -> None:
        """Top-level lists are followed by a blank line."""
        lst = UnorderedList(children=[ListItem(children=[para("a")])])
        text = "".join(r.text for r in render(lst, para("after")))
        assert text == "\t•\ta\n\nafter"

    def test_list_item_text_has_no_list_depth(self) -> None:
        """Only marker runs carry the list depth."""
        runs = render(UnorderedList(children=[ListItem(children=[para("a")])]))
        assert runs[1].attributes.list_depth is None
        assert runs[1].attributes.paragraph is None


@pytest.mark.unit
class TestQuoteRendering:
    """Tests for block quotes."""

    def test_single_quote(self) -> None:
        """Quoted blocks get a bar marker and muted text."""
        runs = render(BlockQuote(children=[para("q")]))
        assert [r.text for r in runs] == ["\t", "q"]
        marker = runs[0].attributes
        assert marker.quote_depth == 0
        assert marker.background is ColorTag.QUOTE_BACKGROUND
        assert marker.paragraph.tab_stops == (TabStop(19.0, "left"),)
        assert marker.paragraph.head_indent == 27.0
        assert all(r.attributes.foreground is ColorTag.QUOTE_TEXT for r in runs)

    def test_nested_quote(self) -> None:
        """Nested quotes emit one marker per level with increasing depth."""
        runs = render(BlockQuote(children=[BlockQuote(children=[para("x")])]))
        assert [r.text for r in runs] == ["\t", "\t", "x"]
        assert runs[0].attributes.quote_depth == 0
        assert runs[1].attributes.quote_depth == 1
        assert runs[1].attributes.paragraph.first_tab_stop == 39.0

    def test_quote_overrides_link_color_but_keeps_target(self) -> None:
        """Links inside quotes are muted but still clickable."""
        link = Link(destination="https://example.com", children=[Text(content="l")])
        runs = render(BlockQuote(children=[Paragraph(children=[link])]))
        assert runs[1].attributes.foreground is ColorTag.QUOTE_TEXT
        assert runs[1].attributes.link == "https://example.com"

    def test_quote_followed_by_paragraph(self) -> None:
        """Quotes are followed by a blank line."""
        text = "".join(r.text for r in render(BlockQuote(children=[para("q")]), para("after")))
        assert text == "\tq\n\nafter"


@pytest.mark.unit
class TestMarkdownEntryPoints:
    """Tests for the markdown convenience functions."""

    def test_markdown_to_runs(self) -> None:
        """Headings, emphasis and paragraphs convert end to end."""
        doc = markdown_to_runs("# Title\n\nSome **bold** text")
        assert doc.text == "Title\n\nSome bold text"
        assert doc[0].attributes.font_size == 26.0
        bold = [run for run in doc if run.text == "bold"]
        assert bold and bold[0].attributes.is_bold

    def test_escaped_newlines(self) -> None:
        """Literal backslash-n sequences are treated as newlines by default."""
        assert markdown_to_runs("One\\n\\nTwo").text == "One\n\nTwo"

    def test_base_font_size_option(self) -> None:
        """Base size changes body, code and heading sizes together."""
        options = StyledRunOptions(base_font_size=30.0)
        doc = markdown_to_runs("# H\n\n`c`", options=options)
        assert doc[0].attributes.font_size == 52.0
        code = [run for run in doc if run.text == " c "]
        assert code[0].attributes.font_size == 29.0

    def test_sample_document(self, sample_markdown: str) -> None:
        """The sample document produces mentions, images and markers."""
        doc = markdown_to_runs(sample_markdown)
        mentions = doc.runs_with("mention")
        assert [run.attributes.link for _, run in mentions] == ["mention://ada42"]
        images = doc.runs_with("image")
        assert len(images) == 1
        assert images[0][1].text == "diagram"
        assert images[0][1].attributes.image_title == "Architecture"
        assert any(run.text == "\t•\t" for run in doc)
        assert any(run.text == "\t2.\t" and run.attributes.list_depth == 1 for run in doc)

    def test_render_to_string(self) -> None:
        """render_to_string returns the plain text."""
        renderer = StyledRunRenderer()
        assert renderer.render_to_string(Document(children=[para("a"), para("b")])) == "a\n\nb"


@pytest.mark.unit
class TestScenarios:
    """End-to-end conversions of short markdown inputs."""

    def test_image_scenario(self) -> None:
        """An image with alt text becomes one marker run linking to its source."""
        doc = markdown_to_runs("![Alt Text](https://example.com/image.jpg)")
        images = doc.runs_with("image")
        assert len(images) == 1
        run = images[0][1]
        assert run.text == "Alt Text"
        assert run.attributes.image.url == "https://example.com/image.jpg"
        assert run.attributes.link == "https://example.com/image.jpg"

    def test_heading_then_body(self) -> None:
        """A heading is followed by a blank-line separator and body text at base size."""
        doc = markdown_to_runs("# Heading\n\nBody text")
        assert [run.text for run in doc] == ["Heading", "\n\n", "Body text"]
        assert doc[0].attributes.is_bold
        assert doc[0].attributes.font_size > 15.0
        assert doc[2].attributes.font_size == 15.0

    def test_three_bullets_share_tab_stops(self) -> None:
        """Root-level bullets share tab stops and depth 0."""
        doc = markdown_to_runs("- one\n- two\n- three")
        markers = [run for run in doc if run.text == "\t•\t"]
        assert len(markers) == 3
        assert len({run.attributes.paragraph for run in markers}) == 1
        assert {run.attributes.list_depth for run in markers} == {0}

    def test_escaped_newline_scenario(self) -> None:
        """Escaped newlines are rewritten before parsing."""
        text = markdown_to_runs("First line\\nSecond line").text
        assert "First line" in text
        assert "Second line" in text
        assert "\\n" not in text

    def test_character_references_scenario(self) -> None:
        """Character references are shown as the characters they name."""
        doc = markdown_to_runs("Tom &amp; Jerry &lt;3")
        assert doc.text == "Tom & Jerry <3"
