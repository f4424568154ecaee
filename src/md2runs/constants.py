#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the md2runs library.

This module centralizes the hardcoded values, magic numbers, and default
configuration constants used across md2runs.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Typography - Font faces and size formulas
3. Indentation Layout - Margins, tab stops and marker glyphs
4. Link Resolution - Entity mention routes and schemes
5. Image Cache and Network - Capacities, ceilings and environment switches
6. Dependency Specifications - Optional package requirements
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

OutputFormat = Literal["text", "json", "table"]
TabAlignment = Literal["left", "right"]

# =============================================================================
# Typography
# =============================================================================

DEFAULT_BASE_FONT_SIZE = 15.0

# Headings are sized as (HEADING_SIZE_BASE - HEADING_SIZE_STEP * level) at the
# reference base size and scaled proportionally for other base sizes.
HEADING_SIZE_BASE = 28.0
HEADING_SIZE_STEP = 2.0
HEADING_REFERENCE_FONT_SIZE = 15.0

# Inline code and code blocks render one point smaller than body text
CODE_FONT_SIZE_DELTA = 1.0

# Standard Type-1 faces available to reportlab without any font files
DEFAULT_BODY_FONT = "Helvetica"
DEFAULT_MONOSPACE_FONT = "Courier"
DEFAULT_NUMERAL_FONT = "Courier"

# =============================================================================
# Indentation Layout
# =============================================================================

DEFAULT_LIST_BASE_MARGIN = 15.0
DEFAULT_LIST_DEPTH_STEP = 20.0
DEFAULT_MARKER_GAP = 8.0
DEFAULT_QUOTE_BORDER_WIDTH = 4.0
DEFAULT_QUOTE_PARAGRAPH_SPACING = 4.0

BULLET_GLYPH = "•"
MARKER_TAB = "\t"

CODE_BLOCK_LINE_SPACING = 4.0
CODE_BLOCK_PARAGRAPH_SPACING = 8.0
CODE_BLOCK_INDENT = 12.0

SINGLE_NEWLINE = "\n"
DOUBLE_NEWLINE = "\n\n"

# Object replacement character, used for image runs without alt text and for
# runs whose display content is an image attachment
OBJECT_REPLACEMENT_CHAR = "￼"

# Upper bound on ancestor-chain walks; longer chains are treated as cyclic input
MAX_TREE_DEPTH = 10_000

# =============================================================================
# Link Resolution
# =============================================================================

DEFAULT_MENTION_ROUTE_PREFIX = "/user/"
DEFAULT_MENTION_SCHEME = "mention"

# =============================================================================
# Image Cache and Network
# =============================================================================

DEFAULT_IMAGE_CACHE_MAX_ENTRIES = 100
DEFAULT_IMAGE_CACHE_MAX_MEMORY_BYTES = 50 * 1024 * 1024  # decoded RGBA pixels
DEFAULT_MAX_IMAGE_DOWNLOAD_BYTES = 20 * 1024 * 1024
DEFAULT_EXPECTED_IMAGE_CONTENT_TYPES: tuple[str, ...] = ("image/",)
DEFAULT_USER_AGENT = "md2runs-fetcher/1.0"
DEFAULT_MAX_REDIRECTS = 5
NETWORK_CHUNK_SIZE = 8192

DEFAULT_MAX_IMAGE_WIDTH = 300.0
DEFAULT_PLACEHOLDER_ASPECT_RATIO = 0.6
PLACEHOLDER_ICON_SIZE = 40
PLACEHOLDER_FILL_COLOR = (229, 229, 234, 255)
PLACEHOLDER_ICON_COLOR = (199, 199, 204, 255)

ENV_DISABLE_NETWORK = "MD2RUNS_DISABLE_NETWORK"
ENV_USER_AGENT = "MD2RUNS_USER_AGENT"
ENV_CONFIG = "MD2RUNS_CONFIG"

# =============================================================================
# Dependency Specifications for @requires_dependencies decorator
# =============================================================================
# Each spec is a list of tuples: (pip_package, import_name, version_constraint)

DEPS_MARKDOWN = [("mistune", "mistune", ">=3.0.0")]
DEPS_FONT_METRICS = [("reportlab", "reportlab", ">=4.0.0")]
DEPS_NETWORK = [("httpx", "httpx", ">=0.28.1")]
DEPS_IMAGES = [("Pillow", "PIL", ">=9.1.0")]
