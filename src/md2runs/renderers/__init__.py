#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/renderers/__init__.py
"""Renderers converting the document tree into display-ready output."""

from md2runs.renderers.base import BaseRenderer
from md2runs.renderers.styled_runs import StyledRunRenderer, heading_font_size, markdown_to_runs

__all__ = ["BaseRenderer", "StyledRunRenderer", "heading_font_size", "markdown_to_runs"]
