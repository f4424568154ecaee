#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/images/decode.py
"""Decoding, scaling and placeholder drawing with Pillow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import TYPE_CHECKING

from md2runs.constants import DEPS_IMAGES, PLACEHOLDER_FILL_COLOR, PLACEHOLDER_ICON_COLOR, PLACEHOLDER_ICON_SIZE
from md2runs.exceptions import ImageDecodeError
from md2runs.utils.decorators import requires_dependencies

if TYPE_CHECKING:
    from PIL.Image import Image as PILImage

logger = logging.getLogger(__name__)

BYTES_PER_PIXEL = 4


@dataclass(frozen=True, eq=False)
class CachedImage:
    """A decoded image together with its natural pixel dimensions.

    Parameters
    ----------
    url : str
        Source URL the image was fetched from
    image : PIL.Image.Image
        Decoded RGBA image

    """

    url: str
    image: PILImage

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def memory_bytes(self) -> int:
        """Approximate decoded memory footprint (RGBA)."""
        return self.width * self.height * BYTES_PER_PIXEL


@requires_dependencies("images", DEPS_IMAGES)
def decode_image(data: bytes, url: str | None = None) -> PILImage:
    """Decode an image payload into an RGBA Pillow image.

    Parameters
    ----------
    data : bytes
        Raw payload
    url : str, optional
        Source URL, for error messages

    Returns
    -------
    PIL.Image.Image
        Fully loaded RGBA image

    Raises
    ------
    ImageDecodeError
        If Pillow cannot identify or decode the payload

    """
    from PIL import Image, UnidentifiedImageError

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            decoded = img.convert("RGBA") if img.mode != "RGBA" else img.copy()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Could not decode image data from {url or 'payload'}: {e}", url=url, original_error=e) from e

    logger.debug(f"Decoded {decoded.width}x{decoded.height} image from {url or 'payload'}")
    return decoded


@requires_dependencies("images", DEPS_IMAGES)
def scale_to_width(image: PILImage, max_width: float) -> PILImage:
    """Proportionally downscale ``image`` so it is at most ``max_width`` wide.

    Images at or under the limit are returned unchanged.

    Parameters
    ----------
    image : PIL.Image.Image
        Source image
    max_width : float
        Maximum width in pixels

    Returns
    -------
    PIL.Image.Image
        The original image, or a resized copy with the same aspect ratio

    """
    from PIL import Image

    if image.width <= max_width:
        return image

    ratio = max_width / image.width
    new_size = (max(1, round(max_width)), max(1, round(image.height * ratio)))
    return image.resize(new_size, Image.Resampling.LANCZOS)


@requires_dependencies("images", DEPS_IMAGES)
def create_placeholder_image(width: float, aspect_ratio: float) -> PILImage:
    """Draw the loading placeholder: a gray rectangle with a centered circle.

    Parameters
    ----------
    width : float
        Placeholder width in pixels
    aspect_ratio : float
        Height as a fraction of the width

    Returns
    -------
    PIL.Image.Image
        RGBA placeholder image

    """
    from PIL import Image, ImageDraw

    size = (max(1, round(width)), max(1, round(width * aspect_ratio)))
    placeholder = Image.new("RGBA", size, PLACEHOLDER_FILL_COLOR)

    icon = min(PLACEHOLDER_ICON_SIZE, size[0], size[1])
    left = (size[0] - icon) // 2
    top = (size[1] - icon) // 2
    ImageDraw.Draw(placeholder).ellipse((left, top, left + icon - 1, top + icon - 1), fill=PLACEHOLDER_ICON_COLOR)
    return placeholder
