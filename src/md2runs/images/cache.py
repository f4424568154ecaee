#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/images/cache.py
"""Cache-aside store of decoded remote images.

``ImageCache`` is an explicitly constructed object: create one at startup,
pass it to whatever needs images, and drop it (or ``clear`` it) at shutdown.
Tests get isolation by constructing a fresh cache with a mock transport.

Behavior
--------
- ``lookup`` is synchronous and never touches the network.
- ``fetch`` checks the cache first; on a miss it downloads, decodes (in a
  worker thread) and stores the image. Failures are returned as values and
  are never cached, so a later fetch may succeed.
- Concurrent fetches of the same URL are independent: each one performs its
  own request and the last to finish writes the entry.
- ``clear`` does not cancel fetches in flight; a late fetch may repopulate
  the cache.

Entries are evicted least-recently-used first when either the entry count or
the decoded memory ceiling is exceeded. The most recently stored entry is
always kept.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import urlsplit, urlunsplit

from md2runs.exceptions import ImageError, Md2RunsError, NetworkSecurityError
from md2runs.images.decode import CachedImage, decode_image
from md2runs.images.network import fetch_image_bytes, fetch_image_bytes_sync
from md2runs.options.images import ImageCacheOptions

if TYPE_CHECKING:
    from PIL.Image import Image as PILImage

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """Normalize an image URL into a cache key.

    Scheme and host are lower-cased, default ports and fragments are dropped,
    and an empty path becomes ``/``. Unparsable URLs are returned unchanged.

    Examples
    --------
    >>> normalize_url("HTTPS://Example.COM:443/a.png#top")
    'https://example.com/a.png'

    """
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        return url

    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"

    netloc = host
    if parts.username is not None:
        userinfo = parts.username if parts.password is None else f"{parts.username}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{netloc}:{port}"

    path = parts.path or ("/" if netloc else "")
    return urlunsplit((scheme, netloc, path, parts.query, ""))


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch call.

    Parameters
    ----------
    url : str
        The URL as requested
    image : CachedImage or None
        The image on success
    error : Md2RunsError or None
        The failure on error
    from_cache : bool, default False
        True when the result was served without a network request

    """

    url: str
    image: Optional[CachedImage] = None
    error: Optional[Md2RunsError] = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.image is not None


class ImageCache:
    """Bounded LRU cache of decoded images keyed by normalized URL.

    Parameters
    ----------
    options : ImageCacheOptions or None, default None
        Capacity and network policy
    transport : httpx transport, optional
        Transport passed to every httpx client this cache opens; used to
        substitute the network in tests

    Examples
    --------
        >>> cache = ImageCache()
        >>> result = asyncio.run(cache.fetch("https://example.com/a.png"))
        >>> cache.lookup("https://example.com/a.png") is result.image
        True

    """

    def __init__(self, options: ImageCacheOptions | None = None, transport: Any = None):
        self.options = options or ImageCacheOptions()
        self._transport = transport
        self._entries: OrderedDict[str, CachedImage] = OrderedDict()
        self._memory_bytes = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, url: object) -> bool:
        if not isinstance(url, str):
            return False
        with self._lock:
            return normalize_url(url) in self._entries

    @property
    def memory_bytes(self) -> int:
        """Decoded memory currently held."""
        with self._lock:
            return self._memory_bytes

    def lookup(self, url: str) -> Optional[CachedImage]:
        """Return the cached image for ``url``, or None. Never performs I/O."""
        key = normalize_url(url)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
        logger.debug(f"Image cache {'hit' if entry is not None else 'miss'}: {key}")
        return entry

    def store(self, url: str, image: PILImage) -> CachedImage:
        """Insert (or replace) the image for ``url`` and apply eviction.

        Returns
        -------
        CachedImage
            The stored entry

        """
        key = normalize_url(url)
        entry = CachedImage(url=url, image=image)
        with self._lock:
            previous = self._entries.pop(key, None)
            if previous is not None:
                self._memory_bytes -= previous.memory_bytes
            self._entries[key] = entry
            self._memory_bytes += entry.memory_bytes
            self._evict_locked()
        return entry

    def clear(self) -> None:
        """Remove every entry. Fetches already in flight are not cancelled."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._memory_bytes = 0
        logger.debug(f"Image cache cleared ({count} entries)")

    def _evict_locked(self) -> None:
        while len(self._entries) > 1 and (
            len(self._entries) > self.options.max_entries or self._memory_bytes > self.options.max_memory_bytes
        ):
            key, evicted = self._entries.popitem(last=False)
            self._memory_bytes -= evicted.memory_bytes
            logger.debug(f"Evicted {key} from image cache ({evicted.memory_bytes} bytes)")

    async def fetch(self, url: str) -> FetchResult:
        """Return the image for ``url``, downloading it on a cache miss.

        Never raises for network or decode failures; those are reported in
        ``FetchResult.error`` and logged.

        Parameters
        ----------
        url : str
            Image URL

        Returns
        -------
        FetchResult
            Success with the image, or failure with the error

        """
        cached = self.lookup(url)
        if cached is not None:
            return FetchResult(url=url, image=cached, from_cache=True)

        try:
            data = await fetch_image_bytes(url, self.options, transport=self._transport)
            image = await asyncio.to_thread(decode_image, data, url)
        except (ImageError, NetworkSecurityError) as e:
            logger.warning(f"Failed to load image {url}: {e}")
            return FetchResult(url=url, error=e)

        return FetchResult(url=url, image=self.store(url, image))

    def load_sync(self, url: str) -> Optional[CachedImage]:
        """Blocking cache-aside load; returns None on any fetch or decode failure."""
        cached = self.lookup(url)
        if cached is not None:
            return cached

        try:
            data = fetch_image_bytes_sync(url, self.options, transport=self._transport)
            image = decode_image(data, url)
        except (ImageError, NetworkSecurityError) as e:
            logger.warning(f"Failed to load image {url}: {e}")
            return None

        return self.store(url, image)
