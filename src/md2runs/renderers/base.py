#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/renderers/base.py
"""Base class for document tree renderers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from md2runs.ast import Node
from md2runs.exceptions import InvalidOptionsError


class BaseRenderer(ABC):
    """Abstract base class for renderers of the md2runs document tree.

    Parameters
    ----------
    options : object or None, default = None
        Renderer-specific options dataclass

    """

    def __init__(self, options: Any = None):
        """Initialize the renderer with optional configuration."""
        self.options = options

    @abstractmethod
    def render(self, doc: Node) -> Any:
        """Render a document tree.

        Parameters
        ----------
        doc : Node
            Root of the tree to render (normally a Document)

        """

    def render_to_string(self, doc: Node) -> str:
        """Render the tree to a plain string (if applicable).

        Raises
        ------
        NotImplementedError
            If the renderer does not support string output

        """
        raise NotImplementedError(f"{self.__class__.__name__} does not support rendering to a string.")

    @staticmethod
    def _validate_options_type(options: Any, expected_type: type, renderer_name: str) -> None:
        """Validate that options are of the correct type for this renderer.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                component_name=renderer_name,
                expected_type=expected_type,
                received_type=type(options),
            )
