#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for ancestor-chain depth and containment queries."""

import pytest

from md2runs.ast import (
    BlockQuote,
    Document,
    ListItem,
    OrderedList,
    Paragraph,
    Text,
    UnorderedList,
    depth_of,
    find_ancestor,
    is_contained_in_list,
    is_list_container,
    iter_ancestors,
    list_depth,
    quote_depth,
    walk,
)
from md2runs.exceptions import MalformedTreeError


def _nested_lists():
    """Build UL > LI > OL > LI > UL > LI and return the three lists."""
    inner = UnorderedList(children=[ListItem(children=[Paragraph(children=[Text(content="c")])])])
    middle = OrderedList(children=[ListItem(children=[Paragraph(children=[Text(content="b")]), inner])])
    outer = UnorderedList(children=[ListItem(children=[Paragraph(children=[Text(content="a")]), middle])])
    Document(children=[outer])
    return outer, middle, inner


@pytest.mark.unit
class TestListDepth:
    """Tests for list nesting depth."""

    def test_root_list_depth_zero(self) -> None:
        """A root-level list and its items are at depth 0."""
        outer, _, _ = _nested_lists()
        assert list_depth(outer) == 0
        assert list_depth(outer.children[0]) == 0

    def test_nested_depths(self) -> None:
        """Each enclosing list container adds one level."""
        outer, middle, inner = _nested_lists()
        assert list_depth(middle) == 1
        assert list_depth(middle.children[0]) == 1
        assert list_depth(inner) == 2
        assert list_depth(inner.children[0]) == 2

    def test_depth_ignores_intervening_quotes(self) -> None:
        """Only list containers are counted, not other block ancestors."""
        inner = UnorderedList(children=[ListItem()])
        outer = UnorderedList(children=[ListItem(children=[BlockQuote(children=[inner])])])
        Document(children=[outer])
        assert list_depth(inner) == 1

    def test_detached_item(self) -> None:
        """A list item without a parent is at depth 0."""
        assert list_depth(ListItem()) == 0


@pytest.mark.unit
class TestQuoteDepth:
    """Tests for block-quote nesting depth."""

    def test_top_level_quote(self) -> None:
        """A quote with no quote ancestors is at depth 0."""
        quote = BlockQuote(children=[Paragraph(children=[Text(content="q")])])
        Document(children=[quote])
        assert quote_depth(quote) == 0

    def test_nested_quote(self) -> None:
        """A quote inside another quote is at depth 1."""
        inner = BlockQuote(children=[Paragraph(children=[Text(content="q")])])
        outer = BlockQuote(children=[inner])
        Document(children=[outer])
        assert quote_depth(outer) == 0
        assert quote_depth(inner) == 1

    def test_block_inside_quote_uses_enclosing_quote(self) -> None:
        """A non-quote node reports the depth of its nearest quote."""
        para = Paragraph(children=[Text(content="q")])
        inner = BlockQuote(children=[para])
        Document(children=[BlockQuote(children=[inner])])
        assert quote_depth(para) == 1

    def test_outside_any_quote(self) -> None:
        """Nodes outside quotes are at depth 0."""
        para = Paragraph()
        Document(children=[para])
        assert quote_depth(para) == 0


@pytest.mark.unit
class TestContainment:
    """Tests for containment and traversal helpers."""

    def test_is_contained_in_list(self) -> None:
        """Paragraphs inside list items are contained; top-level ones are not."""
        outer, _, _ = _nested_lists()
        nested_para = outer.children[0].children[0]
        top_para = Paragraph()
        Document(children=[top_para])

        assert is_contained_in_list(nested_para) is True
        assert is_contained_in_list(top_para) is False
        assert is_contained_in_list(outer) is False

    def test_find_ancestor(self) -> None:
        """find_ancestor returns the nearest match."""
        outer, middle, inner = _nested_lists()
        text = inner.children[0].children[0].children[0]
        assert find_ancestor(text, is_list_container) is inner
        assert find_ancestor(outer, is_list_container) is None

    def test_depth_of_counts_matches(self) -> None:
        """depth_of counts matching ancestors only."""
        _, _, inner = _nested_lists()
        text = inner.children[0].children[0].children[0]
        assert depth_of(text, is_list_container) == 3

    def test_walk_order(self) -> None:
        """walk yields nodes depth-first, left to right."""
        a = Text(content="a")
        b = Text(content="b")
        p1 = Paragraph(children=[a])
        p2 = Paragraph(children=[b])
        doc = Document(children=[p1, p2])
        assert list(walk(doc)) == [doc, p1, a, p2, b]


@pytest.mark.unit
class TestMalformedTrees:
    """Tests for bounded ancestor walks."""

    def test_cyclic_parent_chain_raises(self) -> None:
        """A parent cycle is reported instead of looping forever."""
        first = Paragraph()
        second = Paragraph()
        first.parent = second
        second.parent = first

        with pytest.raises(MalformedTreeError):
            list(iter_ancestors(first, max_depth=50))

    def test_bound_not_hit_for_shallow_tree(self) -> None:
        """Walks shorter than the bound succeed."""
        text = Text(content="x")
        Document(children=[Paragraph(children=[text])])
        assert len(list(iter_ancestors(text, max_depth=2))) == 2
