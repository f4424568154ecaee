"""Test utilities for the md2runs test suite.

This module provides helpers for building document trees, image payloads and
mock HTTP transports used by the unit tests.
"""

import io
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional

import httpx
from PIL import Image as PILImage

from md2runs.styling import ImageMarker, StyleAttributes, StyledDocument, StyledRun

BASE_SIZE = 15.0


def create_test_temp_dir() -> Path:
    """Create a temporary directory for test files."""
    return Path(tempfile.mkdtemp(prefix="md2runs_test_"))


def cleanup_test_dir(path: Path) -> None:
    """Remove a temporary test directory and its contents."""
    shutil.rmtree(path, ignore_errors=True)


def make_png_bytes(width: int = 4, height: int = 3, color: tuple = (255, 0, 0, 255)) -> bytes:
    """Encode a solid-color RGBA PNG of the given size."""
    buffer = io.BytesIO()
    PILImage.new("RGBA", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def image_transport(
    routes: Dict[str, bytes],
    content_type: str = "image/png",
    calls: Optional[list] = None,
) -> httpx.MockTransport:
    """Build a mock transport serving ``routes`` (URL -> payload); other URLs get 404.

    Every requested URL is appended to ``calls`` when a list is given.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if calls is not None:
            calls.append(url)
        if url in routes:
            return httpx.Response(200, content=routes[url], headers={"content-type": content_type})
        return httpx.Response(404, content=b"not found")

    return httpx.MockTransport(handler)


def base_attributes(**changes) -> StyleAttributes:
    """Return default body attributes at the test base size, with ``changes`` applied."""
    return StyleAttributes(font_size=BASE_SIZE).with_updates(**changes)


def image_marker_document(*urls: str) -> StyledDocument:
    """Build a document alternating plain text runs and image marker runs."""
    doc = StyledDocument()
    for url in urls:
        doc.append(StyledRun("before ", base_attributes()))
        doc.append(StyledRun("alt", base_attributes(image=ImageMarker(url=url), link=url)))
    return doc
