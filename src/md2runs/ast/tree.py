#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/ast/tree.py
"""Ancestor-chain queries over the document tree.

Nesting depth and containment are computed purely from ``parent`` links, with
no counters threaded through the traversal. Every walk is an explicit loop
bounded by ``MAX_TREE_DEPTH``; a longer chain means the tree is cyclic or
otherwise malformed, and is reported with ``MalformedTreeError``.

"""

from __future__ import annotations

from typing import Callable, Iterator, Optional

from md2runs.ast.nodes import Node, is_block_quote, is_list_container
from md2runs.constants import MAX_TREE_DEPTH
from md2runs.exceptions import MalformedTreeError

NodePredicate = Callable[[Node], bool]


def iter_ancestors(node: Node, max_depth: int = MAX_TREE_DEPTH) -> Iterator[Node]:
    """Yield the ancestors of ``node``, nearest first, with a hard bound.

    Parameters
    ----------
    node : Node
        Starting node (not yielded itself)
    max_depth : int, default MAX_TREE_DEPTH
        Maximum number of ancestors to visit

    Yields
    ------
    Node
        Each ancestor up to the root

    Raises
    ------
    MalformedTreeError
        If more than ``max_depth`` ancestors are encountered

    """
    current = node.parent
    steps = 0
    while current is not None:
        steps += 1
        if steps > max_depth:
            raise MalformedTreeError(
                f"Ancestor chain exceeds {max_depth} nodes; the tree is cyclic or malformed",
                node_kind=node.kind.value,
            )
        yield current
        current = current.parent


def depth_of(node: Node, predicate: NodePredicate, max_depth: int = MAX_TREE_DEPTH) -> int:
    """Count the ancestors of ``node`` that satisfy ``predicate``.

    Parameters
    ----------
    node : Node
        Node whose nesting depth is requested
    predicate : callable
        Kind predicate applied to each ancestor
    max_depth : int, default MAX_TREE_DEPTH
        Bound on the ancestor walk

    Returns
    -------
    int
        Number of matching ancestors; 0 when none match

    Examples
    --------
        >>> from md2runs.ast.nodes import is_list_container
        >>> depth_of(item, is_list_container)
        0

    """
    return sum(1 for ancestor in iter_ancestors(node, max_depth) if predicate(ancestor))


def find_ancestor(node: Node, predicate: NodePredicate) -> Optional[Node]:
    """Return the nearest ancestor satisfying ``predicate``, or None."""
    for ancestor in iter_ancestors(node):
        if predicate(ancestor):
            return ancestor
    return None


def list_depth(node: Node) -> int:
    """Return the list nesting depth of a list or list item.

    A list item's depth is the number of list containers enclosing the list
    it belongs to: items of a root-level list are at depth 0, items of a list
    nested inside one other list's item are at depth 1.

    Parameters
    ----------
    node : Node
        A list container or a list item

    Returns
    -------
    int
        Nesting depth, always >= 0

    """
    container = node if is_list_container(node) else node.parent
    if container is None:
        return 0
    return depth_of(container, is_list_container)


def quote_depth(node: Node) -> int:
    """Return the quote nesting depth of a block quote or of a block inside one.

    The depth is the number of block quotes enclosing the quote itself, so a
    top-level quote is at depth 0 and a quote inside it at depth 1.
    """
    quote = node if is_block_quote(node) else find_ancestor(node, is_block_quote)
    if quote is None:
        return 0
    return depth_of(quote, is_block_quote)


def is_contained_in_list(node: Node) -> bool:
    """Return True if any ancestor of ``node`` is a list container."""
    return find_ancestor(node, is_list_container) is not None


def walk(root: Node) -> Iterator[Node]:
    """Yield every node of the tree in depth-first, left-to-right order.

    Uses an explicit stack instead of recursion.
    """
    stack: list[Node] = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))
