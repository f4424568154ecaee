#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/images/presenter.py
"""Substitute image-marker runs with displayable image attachments.

This is the consumer side of the image cache: given a converted
``StyledDocument``, ``present`` swaps every image-marker run for a single
object-replacement character carrying an ``ImageAttachment`` (the cached
image when available, a placeholder otherwise). ``load_pending`` then fetches
every placeholder concurrently and patches each run as its image arrives.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from md2runs.constants import OBJECT_REPLACEMENT_CHAR
from md2runs.images.cache import FetchResult, ImageCache
from md2runs.images.decode import create_placeholder_image, scale_to_width
from md2runs.options.images import ImagePresentationOptions
from md2runs.styling.runs import StyledDocument, StyledRun

if TYPE_CHECKING:
    from PIL.Image import Image as PILImage

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[int, StyledRun], None]


@dataclass(frozen=True, eq=False)
class ImageAttachment:
    """Display content of an image run.

    Parameters
    ----------
    url : str
        Image source URL
    image : PIL.Image.Image
        Image to display, already scaled to the presentation width
    is_placeholder : bool
        True while the real image has not been loaded

    """

    url: str
    image: PILImage
    is_placeholder: bool = False

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "width": self.width, "height": self.height, "placeholder": self.is_placeholder}


class ImagePresenter:
    """Replace image markers with attachments and load missing images.

    Parameters
    ----------
    cache : ImageCache
        Cache consulted for already-loaded images and used for fetching
    options : ImagePresentationOptions or None, default None
        Maximum width and placeholder geometry

    """

    def __init__(self, cache: ImageCache, options: ImagePresentationOptions | None = None):
        self.cache = cache
        self.options = options or ImagePresentationOptions()
        self._placeholder: Optional[PILImage] = None

    def placeholder_image(self) -> PILImage:
        """Return the shared placeholder image, drawing it on first use."""
        if self._placeholder is None:
            self._placeholder = create_placeholder_image(self.options.max_width, self.options.placeholder_aspect_ratio)
        return self._placeholder

    def attachment_for(self, url: str) -> ImageAttachment:
        """Build the attachment for ``url`` from the cache, or a placeholder."""
        cached = self.cache.lookup(url)
        if cached is not None:
            return ImageAttachment(url=url, image=scale_to_width(cached.image, self.options.max_width))
        return ImageAttachment(url=url, image=self.placeholder_image(), is_placeholder=True)

    def present(self, document: StyledDocument) -> StyledDocument:
        """Return a copy of ``document`` with image markers replaced by attachments.

        Each image-marker run becomes one U+FFFC run whose attributes keep the
        original link target and gain an ``attachment``. Other runs are copied
        unchanged.

        Parameters
        ----------
        document : StyledDocument
            Converter output

        Returns
        -------
        StyledDocument
            New document ready for display

        """
        result = StyledDocument()
        for run in document:
            marker = run.attributes.image
            if marker is None:
                result.append(run)
                continue
            result.append(self._attachment_run(run, self.attachment_for(marker.url)))
        return result

    @staticmethod
    def _attachment_run(run: StyledRun, attachment: ImageAttachment) -> StyledRun:
        return StyledRun(OBJECT_REPLACEMENT_CHAR, run.attributes.with_updates(attachment=attachment))

    @staticmethod
    def pending(document: StyledDocument) -> list[tuple[int, str]]:
        """Return ``(index, url)`` for every run still showing a placeholder."""
        return [
            (index, run.attributes.attachment.url)
            for index, run in document.runs_with("attachment")
            if run.attributes.attachment.is_placeholder
        ]

    async def load_pending(
        self,
        document: StyledDocument,
        on_update: UpdateCallback | None = None,
    ) -> list[FetchResult]:
        """Fetch every placeholder image and patch ``document`` in place.

        Fetches run concurrently; each run is replaced as soon as its own
        fetch succeeds, so completion order is not guaranteed. Failed fetches
        leave the placeholder in place.

        Parameters
        ----------
        document : StyledDocument
            A document returned by ``present``
        on_update : callable, optional
            Called as ``on_update(index, run)`` in the running event loop
            after each successful replacement

        Returns
        -------
        list of FetchResult
            One result per pending run, in document order

        """
        pending = self.pending(document)
        if not pending:
            return []

        logger.debug(f"Loading {len(pending)} pending images")

        async def load_one(index: int, url: str) -> FetchResult:
            result = await self.cache.fetch(url)
            if result.image is None:
                return result
            scaled = await asyncio.to_thread(scale_to_width, result.image.image, self.options.max_width)
            attachment = ImageAttachment(url=url, image=scaled)
            run = self._attachment_run(document[index], attachment)
            document.replace_run(index, run)
            if on_update is not None:
                on_update(index, run)
            return result

        return list(await asyncio.gather(*(load_one(index, url) for index, url in pending)))
