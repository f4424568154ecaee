"""md2runs - Convert markdown into styled text runs.

md2runs parses markdown (CommonMark plus strikethrough) into a document tree
and renders that tree as a flat sequence of styled runs: text fragments
carrying font, weight, slant, colour tags, link targets, paragraph tab stops
and indents. A host UI can display the runs directly in a rich-text view.

Key Features
------------
- Heading sizes derived from a configurable base font size
- Nested list and block-quote indentation computed from measured marker widths
- Entity-mention links rewritten to a custom URI scheme
- Image marker runs with a bounded LRU cache and safe concurrent fetching
- Configuration from TOML, JSON, YAML or ``[tool.md2runs]`` in pyproject.toml

Examples
--------
    >>> from md2runs import markdown_to_runs
    >>> doc = markdown_to_runs("# Title\\n\\nSome **bold** text")
    >>> doc.text
    'Title\\n\\nSome bold text'

"""

import sys

if sys.version_info < (3, 10):
    raise RuntimeError(
        "md2runs requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "1.0.0"

from md2runs.ast import Document, Node, NodeKind, link_tree, list_depth, quote_depth  # noqa: E402
from md2runs.exceptions import (  # noqa: E402
    DependencyError,
    ImageError,
    InvalidOptionsError,
    MalformedTreeError,
    Md2RunsError,
    NetworkSecurityError,
    ValidationError,
)
from md2runs.options import ImageCacheOptions, ImagePresentationOptions, StyledRunOptions  # noqa: E402
from md2runs.parsers import MarkdownParser, markdown_to_ast  # noqa: E402
from md2runs.renderers import StyledRunRenderer, markdown_to_runs  # noqa: E402
from md2runs.styling import StyleAttributes, StyledDocument, StyledRun  # noqa: E402

__all__ = [
    "__version__",
    # Conversion
    "markdown_to_ast",
    "markdown_to_runs",
    "MarkdownParser",
    "StyledRunRenderer",
    # Tree
    "Document",
    "Node",
    "NodeKind",
    "link_tree",
    "list_depth",
    "quote_depth",
    # Output
    "StyleAttributes",
    "StyledDocument",
    "StyledRun",
    # Options
    "StyledRunOptions",
    "ImageCacheOptions",
    "ImagePresentationOptions",
    # Exceptions
    "Md2RunsError",
    "ValidationError",
    "InvalidOptionsError",
    "MalformedTreeError",
    "ImageError",
    "NetworkSecurityError",
    "DependencyError",
]
