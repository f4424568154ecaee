#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the image cache and its network layer.

All HTTP traffic goes through ``httpx.MockTransport``; no test touches the
network.
"""

import asyncio

import httpx
import pytest
from PIL import Image as PILImage
from utils import image_transport, make_png_bytes

from md2runs.exceptions import ImageDecodeError, ImageFetchError, NetworkSecurityError
from md2runs.images import (
    ImageCache,
    create_placeholder_image,
    decode_image,
    normalize_url,
    scale_to_width,
    validate_image_url,
)
from md2runs.options import ImageCacheOptions

URL = "https://example.com/a.png"


def _rgba(width: int, height: int) -> PILImage.Image:
    return PILImage.new("RGBA", (width, height))


@pytest.mark.unit
class TestNormalizeUrl:
    """Tests for cache key normalization."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("HTTPS://Example.COM:443/a.png#top", "https://example.com/a.png"),
            ("http://example.com", "http://example.com/"),
            ("http://example.com:8080/a.png?x=1", "http://example.com:8080/a.png?x=1"),
        ],
    )
    def test_normalize(self, url: str, expected: str) -> None:
        """Scheme and host are lower-cased and default ports dropped."""
        assert normalize_url(url) == expected

    def test_unparsable_returned_unchanged(self) -> None:
        """URLs that cannot be split are used as-is."""
        assert normalize_url("http://[::1") == "http://[::1"


@pytest.mark.unit
class TestValidateImageUrl:
    """Tests for the pre-request URL policy."""

    def test_accepts_http_and_https(self) -> None:
        """Plain http and https URLs pass by default."""
        validate_image_url("http://example.com/a.png")
        validate_image_url(URL)

    @pytest.mark.parametrize("url", ["ftp://example.com/a.png", "file:///etc/passwd", "/local/a.png", "https:///a.png"])
    def test_rejects_other_schemes_and_missing_host(self, url: str) -> None:
        """Only http(s) URLs with a host are allowed."""
        with pytest.raises(NetworkSecurityError):
            validate_image_url(url)

    def test_require_https(self) -> None:
        """require_https refuses plain http."""
        with pytest.raises(NetworkSecurityError, match="HTTPS required"):
            validate_image_url("http://example.com/a.png", require_https=True)

    def test_allowlist(self) -> None:
        """Hosts outside the allowlist are refused, case-insensitively."""
        validate_image_url("https://EXAMPLE.com/a.png", allowed_hosts=("example.com",))
        with pytest.raises(NetworkSecurityError, match="allowlist"):
            validate_image_url("https://other.com/a.png", allowed_hosts=("example.com",))


@pytest.mark.unit
class TestDecoding:
    """Tests for decoding and scaling helpers."""

    def test_decode_png(self) -> None:
        """PNG payloads decode to RGBA images."""
        image = decode_image(make_png_bytes(5, 2), URL)
        assert image.size == (5, 2)
        assert image.mode == "RGBA"

    def test_decode_garbage(self) -> None:
        """Non-image payloads raise ImageDecodeError."""
        with pytest.raises(ImageDecodeError) as exc_info:
            decode_image(b"definitely not an image", URL)
        assert exc_info.value.url == URL

    def test_scale_down_keeps_aspect(self) -> None:
        """Wide images are scaled to the maximum width."""
        assert scale_to_width(_rgba(600, 300), 300).size == (300, 150)

    def test_small_image_unchanged(self) -> None:
        """Images within the limit are returned as-is."""
        image = _rgba(100, 50)
        assert scale_to_width(image, 300) is image

    def test_placeholder_geometry(self) -> None:
        """The placeholder is max_width wide with the configured aspect ratio."""
        assert create_placeholder_image(300, 0.6).size == (300, 180)


@pytest.mark.unit
class TestCacheStore:
    """Tests for in-memory storage and eviction."""

    def test_lookup_miss_and_hit(self) -> None:
        """lookup returns None until the image is stored; keys are normalized."""
        cache = ImageCache()
        assert cache.lookup(URL) is None
        entry = cache.store(URL, _rgba(4, 3))
        assert cache.lookup("HTTPS://example.com:443/a.png") is entry
        assert URL in cache
        assert len(cache) == 1

    def test_evicts_least_recently_used(self) -> None:
        """The least recently used entry is evicted past max_entries."""
        cache = ImageCache(ImageCacheOptions(max_entries=2))
        cache.store("https://example.com/1.png", _rgba(1, 1))
        cache.store("https://example.com/2.png", _rgba(1, 1))
        cache.lookup("https://example.com/1.png")
        cache.store("https://example.com/3.png", _rgba(1, 1))

        assert "https://example.com/1.png" in cache
        assert "https://example.com/2.png" not in cache
        assert "https://example.com/3.png" in cache

    def test_memory_ceiling(self) -> None:
        """Decoded memory (w * h * 4) is bounded."""
        cache = ImageCache(ImageCacheOptions(max_memory_bytes=100))
        cache.store("https://example.com/1.png", _rgba(4, 3))
        cache.store("https://example.com/2.png", _rgba(4, 3))
        assert cache.memory_bytes == 96
        cache.store("https://example.com/3.png", _rgba(4, 3))
        assert len(cache) == 2
        assert "https://example.com/1.png" not in cache
        assert cache.memory_bytes == 96

    def test_oversized_entry_is_kept(self) -> None:
        """The newest entry survives even if it alone exceeds the ceiling."""
        cache = ImageCache(ImageCacheOptions(max_memory_bytes=10))
        cache.store(URL, _rgba(4, 3))
        assert URL in cache

    def test_replace_updates_memory(self) -> None:
        """Storing the same URL twice replaces the entry."""
        cache = ImageCache()
        cache.store(URL, _rgba(4, 3))
        cache.store(URL, _rgba(2, 2))
        assert len(cache) == 1
        assert cache.memory_bytes == 16

    def test_clear(self) -> None:
        """clear empties the cache."""
        cache = ImageCache()
        cache.store(URL, _rgba(1, 1))
        cache.clear()
        assert len(cache) == 0
        assert cache.memory_bytes == 0


@pytest.mark.unit
@pytest.mark.network
class TestCacheFetch:
    """Tests for cache-aside fetching over a mock transport."""

    def test_fetch_then_cache_hit(self) -> None:
        """The first fetch downloads; the second is served from memory."""
        calls: list = []
        cache = ImageCache(transport=image_transport({URL: make_png_bytes(4, 3)}, calls=calls))

        first = asyncio.run(cache.fetch(URL))
        second = asyncio.run(cache.fetch(URL))

        assert first.ok and not first.from_cache
        assert first.image.width == 4
        assert second.from_cache
        assert second.image is first.image
        assert calls == [URL]
        assert cache.lookup(URL) is first.image

    def test_http_error_is_not_cached(self) -> None:
        """A 404 is reported as a fetch failure and not cached."""
        cache = ImageCache(transport=image_transport({}))
        result = asyncio.run(cache.fetch(URL))
        assert not result.ok
        assert isinstance(result.error, ImageFetchError)
        assert URL not in cache

    def test_unreachable_host(self) -> None:
        """A connection failure resolves as a failed result and leaves the cache empty."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        cache = ImageCache(transport=httpx.MockTransport(handler))
        result = asyncio.run(cache.fetch(URL))
        assert not result.ok
        assert isinstance(result.error, ImageFetchError)
        assert cache.lookup(URL) is None

    @pytest.mark.parametrize("url", ["https://xn--a.example/b.png", "https://bäd..example/b.png"])
    def test_host_rejected_by_idna(self, url: str) -> None:
        """Hosts that only fail IDNA encoding are failures, not exceptions."""
        calls: list = []
        cache = ImageCache(transport=image_transport({}, calls=calls))
        result = asyncio.run(cache.fetch(url))
        assert not result.ok
        assert isinstance(result.error, ImageFetchError)
        assert calls == []
        assert cache.load_sync(url) is None

    def test_clear_does_not_cancel_in_flight_fetch(self) -> None:
        """A fetch suspended across clear() still stores its image afterwards."""
        other = "https://example.com/other.png"

        async def scenario():
            started = asyncio.Event()
            release = asyncio.Event()

            async def handler(request: httpx.Request) -> httpx.Response:
                started.set()
                await release.wait()
                return httpx.Response(200, content=make_png_bytes(3, 2), headers={"content-type": "image/png"})

            cache = ImageCache(transport=httpx.MockTransport(handler))
            cache.store(other, _rgba(1, 1))
            task = asyncio.create_task(cache.fetch(URL))
            await started.wait()
            cache.clear()
            assert len(cache) == 0
            release.set()
            return cache, await task

        cache, result = asyncio.run(scenario())
        assert result.ok
        assert cache.lookup(URL) is result.image
        assert other not in cache

    def test_wrong_content_type(self) -> None:
        """Non-image content types are refused."""
        cache = ImageCache(transport=image_transport({URL: b"<html></html>"}, content_type="text/html"))
        result = asyncio.run(cache.fetch(URL))
        assert isinstance(result.error, ImageFetchError)

    def test_undecodable_payload(self) -> None:
        """Garbage served as image/png is a decode failure."""
        cache = ImageCache(transport=image_transport({URL: b"garbage"}))
        result = asyncio.run(cache.fetch(URL))
        assert isinstance(result.error, ImageDecodeError)

    def test_download_ceiling(self) -> None:
        """Payloads above max_download_bytes are refused."""
        options = ImageCacheOptions(max_download_bytes=10)
        cache = ImageCache(options, transport=image_transport({URL: make_png_bytes(16, 16)}))
        result = asyncio.run(cache.fetch(URL))
        assert isinstance(result.error, NetworkSecurityError)

    def test_network_disabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The global kill switch refuses every request before it is sent."""
        monkeypatch.setenv("MD2RUNS_DISABLE_NETWORK", "true")
        calls: list = []
        cache = ImageCache(transport=image_transport({URL: make_png_bytes()}, calls=calls))
        result = asyncio.run(cache.fetch(URL))
        assert isinstance(result.error, NetworkSecurityError)
        assert calls == []

    def test_redirect_to_disallowed_host(self) -> None:
        """Redirect targets are validated against the allowlist."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "example.com":
                return httpx.Response(302, headers={"location": "https://evil.test/a.png"})
            return httpx.Response(200, content=make_png_bytes(), headers={"content-type": "image/png"})

        options = ImageCacheOptions(allowed_hosts=("example.com",))
        cache = ImageCache(options, transport=httpx.MockTransport(handler))
        result = asyncio.run(cache.fetch(URL))
        assert isinstance(result.error, NetworkSecurityError)

    def test_user_agent_header(self) -> None:
        """Requests carry the configured User-Agent."""
        seen: list = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("user-agent"))
            return httpx.Response(200, content=make_png_bytes(), headers={"content-type": "image/png"})

        options = ImageCacheOptions(user_agent="tester/2.0")
        asyncio.run(ImageCache(options, transport=httpx.MockTransport(handler)).fetch(URL))
        assert seen == ["tester/2.0"]

    def test_concurrent_fetches_are_independent(self) -> None:
        """Concurrent fetches of one URL each request it and all succeed."""
        calls: list = []
        cache = ImageCache(transport=image_transport({URL: make_png_bytes()}, calls=calls))

        async def fetch_many():
            return await asyncio.gather(*(cache.fetch(URL) for _ in range(3)))

        results = asyncio.run(fetch_many())
        assert all(result.ok for result in results)
        assert len(calls) == 3
        assert len(cache) == 1

    def test_load_sync(self) -> None:
        """The blocking loader shares the cache."""
        cache = ImageCache(transport=image_transport({URL: make_png_bytes(2, 2)}))
        entry = cache.load_sync(URL)
        assert entry is not None
        assert entry.width == 2
        assert cache.lookup(URL) is entry

    def test_load_sync_failure(self) -> None:
        """The blocking loader returns None on failure."""
        cache = ImageCache(transport=image_transport({}))
        assert cache.load_sync(URL) is None
