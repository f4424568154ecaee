#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/images/__init__.py
"""Remote image cache, fetching and presentation."""

from md2runs.images.cache import FetchResult, ImageCache, normalize_url
from md2runs.images.decode import CachedImage, create_placeholder_image, decode_image, scale_to_width
from md2runs.images.network import is_network_disabled, validate_image_url
from md2runs.images.presenter import ImageAttachment, ImagePresenter

__all__ = [
    "CachedImage",
    "FetchResult",
    "ImageAttachment",
    "ImageCache",
    "ImagePresenter",
    "create_placeholder_image",
    "decode_image",
    "is_network_disabled",
    "normalize_url",
    "scale_to_width",
    "validate_image_url",
]
