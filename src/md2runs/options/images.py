#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/options/images.py
"""Configuration options for the image cache and image presentation.

This module defines the network and capacity settings of ``ImageCache`` and
the display settings used by ``ImagePresenter`` when substituting image
markers with attachments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from md2runs.constants import (
    DEFAULT_EXPECTED_IMAGE_CONTENT_TYPES,
    DEFAULT_IMAGE_CACHE_MAX_ENTRIES,
    DEFAULT_IMAGE_CACHE_MAX_MEMORY_BYTES,
    DEFAULT_MAX_IMAGE_DOWNLOAD_BYTES,
    DEFAULT_MAX_IMAGE_WIDTH,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_PLACEHOLDER_ASPECT_RATIO,
    DEFAULT_USER_AGENT,
)
from md2runs.options.base import CloneFrozenMixin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageCacheOptions(CloneFrozenMixin):
    """Capacity and network settings for the image cache.

    Parameters
    ----------
    max_entries : int, default 100
        Maximum number of decoded images kept in memory.
    max_memory_bytes : int, default 50 MiB
        Ceiling on the decoded pixel memory (width * height * 4) of all entries.
        Least recently used entries are evicted first.
    max_download_bytes : int, default 20 MiB
        Maximum payload size accepted for a single image download.
    timeout : float or None, default None
        Request timeout in seconds. None leaves the timeout to the HTTP
        transport's own defaults.
    max_redirects : int, default 5
        Maximum number of HTTP redirects to follow.
    user_agent : str, default "md2runs-fetcher/1.0"
        User-Agent header sent with image requests.
    require_https : bool, default False
        Refuse to fetch images over plain HTTP.
    allowed_hosts : tuple of str or None, default None
        Hostnames images may be fetched from. None allows every host.
    expected_content_types : tuple of str, default ("image/",)
        Accepted Content-Type prefixes. An empty tuple disables the check.

    """

    max_entries: int = field(
        default=DEFAULT_IMAGE_CACHE_MAX_ENTRIES,
        metadata={"help": "Maximum number of cached images", "type": int, "importance": "advanced"},
    )
    max_memory_bytes: int = field(
        default=DEFAULT_IMAGE_CACHE_MAX_MEMORY_BYTES,
        metadata={"help": "Maximum decoded memory held by the cache", "type": int, "importance": "advanced"},
    )
    max_download_bytes: int = field(
        default=DEFAULT_MAX_IMAGE_DOWNLOAD_BYTES,
        metadata={"help": "Maximum size of a single image download", "type": int, "importance": "security"},
    )
    timeout: float | None = field(
        default=None,
        metadata={"help": "Request timeout in seconds (default: transport default)", "importance": "advanced"},
    )
    max_redirects: int = field(
        default=DEFAULT_MAX_REDIRECTS,
        metadata={"help": "Maximum number of HTTP redirects to follow", "type": int, "importance": "security"},
    )
    user_agent: str = field(
        default=DEFAULT_USER_AGENT,
        metadata={"help": "User-Agent header for image requests", "importance": "advanced"},
    )
    require_https: bool = field(
        default=False,
        metadata={"help": "Only fetch images over HTTPS", "importance": "security"},
    )
    allowed_hosts: tuple[str, ...] | None = field(
        default=None,
        metadata={"help": "Hostnames images may be fetched from (default: any)", "importance": "security"},
    )
    expected_content_types: tuple[str, ...] = field(
        default=DEFAULT_EXPECTED_IMAGE_CONTENT_TYPES,
        metadata={"help": "Accepted Content-Type prefixes", "importance": "security"},
    )

    def __post_init__(self) -> None:
        """Validate numeric ranges and normalize collections.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        # Config files deliver lists; store tuples so the options stay hashable
        if self.allowed_hosts is not None:
            object.__setattr__(self, "allowed_hosts", tuple(h.lower() for h in self.allowed_hosts))
        object.__setattr__(self, "expected_content_types", tuple(self.expected_content_types))

        if self.max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {self.max_entries}")

        if self.max_memory_bytes <= 0:
            raise ValueError(f"max_memory_bytes must be positive, got {self.max_memory_bytes}")

        if self.max_download_bytes <= 0:
            raise ValueError(f"max_download_bytes must be positive, got {self.max_download_bytes}")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive when set, got {self.timeout}")

        if self.max_redirects < 0:
            raise ValueError(f"max_redirects must be non-negative, got {self.max_redirects}")

        if self.allowed_hosts == ():
            logger.warning("allowed_hosts is empty; every image fetch will be refused")


@dataclass(frozen=True)
class ImagePresentationOptions(CloneFrozenMixin):
    """Display settings for image attachments.

    Parameters
    ----------
    max_width : float, default 300.0
        Images wider than this are proportionally downscaled before display.
        Also the width of the loading placeholder.
    placeholder_aspect_ratio : float, default 0.6
        Placeholder height as a fraction of its width.

    """

    max_width: float = field(
        default=DEFAULT_MAX_IMAGE_WIDTH,
        metadata={"help": "Maximum display width for images", "type": float, "importance": "core"},
    )
    placeholder_aspect_ratio: float = field(
        default=DEFAULT_PLACEHOLDER_ASPECT_RATIO,
        metadata={"help": "Placeholder height as a fraction of its width", "type": float, "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate numeric ranges for presentation options.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        if self.max_width < 1:
            raise ValueError(f"max_width must be at least 1, got {self.max_width}")

        if self.placeholder_aspect_ratio <= 0:
            raise ValueError(f"placeholder_aspect_ratio must be positive, got {self.placeholder_aspect_ratio}")
