#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/options/base.py
"""Base classes for md2runs option dataclasses.

All option objects are frozen dataclasses; modified copies are produced with
``create_updated`` rather than by mutation, so a single options instance can
be shared between converters and caches running concurrently.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)

    @classmethod
    def field_names(cls) -> frozenset[str]:
        """Return the names of all dataclass fields of this options class."""
        return frozenset(f.name for f in fields(cls))  # type: ignore[arg-type]

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> Self:
        """Build an instance from a mapping, ignoring unknown keys.

        Dashes in keys are treated as underscores so configuration files can
        use either spelling (``base-font-size`` or ``base_font_size``).

        Parameters
        ----------
        values : dict
            Field values keyed by field name

        Returns
        -------
        Self
            New options instance

        """
        known = cls.field_names()
        kwargs = {}
        for key, value in values.items():
            name = str(key).replace("-", "_")
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Return the field values as a plain dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
