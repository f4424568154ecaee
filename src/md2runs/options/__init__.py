#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for md2runs components.

Each component takes a frozen options dataclass; use ``create_updated`` (or
``create_updated_options``) to derive a modified copy.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from md2runs.options.base import CloneFrozenMixin
from md2runs.options.converter import StyledRunOptions
from md2runs.options.images import ImageCacheOptions, ImagePresentationOptions


def create_updated_options(options: Any, **kwargs: Any) -> Any:
    """Create a new options instance with updated values.

    Parameters
    ----------
    options : Any
        The original options instance (must be a dataclass)
    **kwargs
        Field values to update

    Returns
    -------
    Any
        New options instance with the updated values

    """
    return replace(options, **kwargs)


__all__ = [
    "CloneFrozenMixin",
    "StyledRunOptions",
    "ImageCacheOptions",
    "ImagePresentationOptions",
    "create_updated_options",
]
