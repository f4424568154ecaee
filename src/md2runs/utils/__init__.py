#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/utils/__init__.py
"""Utility modules for the md2runs package.

This package contains link resolution, dependency checking decorators and
package version helpers.
"""

from md2runs.utils.links import (
    ResolvedLink,
    is_valid_uri,
    mention_id_from_destination,
    mention_id_from_url,
    resolve_link_destination,
)

__all__ = [
    "ResolvedLink",
    "is_valid_uri",
    "mention_id_from_destination",
    "mention_id_from_url",
    "resolve_link_destination",
]
