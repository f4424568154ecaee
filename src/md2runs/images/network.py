#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/images/network.py
"""Network retrieval of image payloads.

Every fetch opens its own httpx client, validates the URL (and every redirect
target) against the cache options, streams the body with a size ceiling and
checks the response content type before any bytes are handed to the decoder.

Functions
---------
- is_network_disabled: Global kill switch via MD2RUNS_DISABLE_NETWORK
- validate_image_url: Scheme, hostname and allowlist checks
- fetch_image_bytes: Async streamed download
- fetch_image_bytes_sync: Blocking streamed download
"""

from __future__ import annotations

import logging
import os
from email.message import Message
from typing import Any, Optional
from urllib.parse import urlsplit

from md2runs.constants import DEPS_NETWORK, ENV_DISABLE_NETWORK, ENV_USER_AGENT, NETWORK_CHUNK_SIZE
from md2runs.exceptions import ImageFetchError, NetworkSecurityError
from md2runs.options.images import ImageCacheOptions
from md2runs.utils.decorators import requires_dependencies

logger = logging.getLogger(__name__)


def is_network_disabled() -> bool:
    """Check if network access is globally disabled via environment variable.

    Returns
    -------
    bool
        True if MD2RUNS_DISABLE_NETWORK is set to a truthy value

    """
    return os.getenv(ENV_DISABLE_NETWORK, "").lower() in ("true", "1", "yes", "on")


def _normalize_hostname(hostname: str) -> str:
    """Normalize a hostname (IDNA, lower case) for allowlist comparison.

    Examples
    --------
    >>> _normalize_hostname("Example.com")
    'example.com'

    """
    try:
        return hostname.encode("idna").decode("ascii").lower()
    except UnicodeError:
        return hostname.lower()


def _parse_content_type(content_type: str) -> str:
    """Return the main MIME type of a Content-Type header, lower-cased.

    Examples
    --------
    >>> _parse_content_type("image/png; charset=binary")
    'image/png'

    """
    if not content_type:
        return ""
    msg = Message()
    msg["content-type"] = content_type
    return msg.get_content_type().lower()


def validate_image_url(url: str, allowed_hosts: Optional[tuple[str, ...]] = None, require_https: bool = False) -> None:
    """Validate an image URL before requesting it.

    Parameters
    ----------
    url : str
        URL to validate
    allowed_hosts : tuple of str or None, default None
        Permitted hostnames; None permits any host
    require_https : bool, default False
        Only permit the https scheme

    Raises
    ------
    NetworkSecurityError
        If the URL is malformed or violates the policy

    """
    try:
        parsed = urlsplit(url)
        hostname = parsed.hostname
    except ValueError as e:
        raise NetworkSecurityError(f"Invalid URL format: {url}", original_error=e) from e

    scheme = parsed.scheme.lower()
    if scheme not in ("http", "https"):
        raise NetworkSecurityError(f"Unsupported URL scheme: {parsed.scheme or '(none)'}")

    if require_https and scheme != "https":
        raise NetworkSecurityError(f"HTTPS required but got: {scheme}")

    if not hostname:
        raise NetworkSecurityError("URL missing hostname")

    if allowed_hosts is not None:
        normalized = _normalize_hostname(hostname)
        if normalized not in {_normalize_hostname(h) for h in allowed_hosts}:
            raise NetworkSecurityError(f"Hostname not in allowlist: {normalized}")


def _client_kwargs(options: ImageCacheOptions, transport: Any = None) -> dict[str, Any]:
    """Build keyword arguments shared by the sync and async httpx clients."""
    kwargs: dict[str, Any] = {
        "follow_redirects": True,
        "max_redirects": options.max_redirects,
        "headers": {"User-Agent": os.getenv(ENV_USER_AGENT) or options.user_agent},
    }
    # No timeout override: the transport's own default applies
    if options.timeout is not None:
        kwargs["timeout"] = options.timeout
    if transport is not None:
        kwargs["transport"] = transport
    return kwargs


def _check_response(response: Any, url: str, options: ImageCacheOptions) -> None:
    """Validate status, declared length and content type of a streamed response."""
    response.raise_for_status()

    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > options.max_download_bytes:
        raise NetworkSecurityError(
            f"Content-Length too large: {declared} bytes (max: {options.max_download_bytes})"
        )

    expected = options.expected_content_types
    content_type = _parse_content_type(response.headers.get("content-type", ""))
    if expected and not any(content_type.startswith(prefix) for prefix in expected):
        raise ImageFetchError(
            f"Invalid content type: {content_type or '(missing)'}. Expected one of: {list(expected)}", url=url
        )


def _accumulate(chunks: list[bytes], chunk: bytes, total: int, options: ImageCacheOptions) -> int:
    total += len(chunk)
    if total > options.max_download_bytes:
        raise NetworkSecurityError(f"Response too large: exceeded {options.max_download_bytes} bytes during streaming")
    chunks.append(chunk)
    return total


def _preflight(url: str, options: ImageCacheOptions) -> None:
    """Reject a URL before any client is opened.

    Besides the policy checks, the URL is parsed the way httpx will parse it
    for the request, so hosts that ``urlsplit`` accepts but IDNA rejects fail
    here as an ``ImageFetchError``.
    """
    import httpx

    if is_network_disabled():
        raise NetworkSecurityError(f"Network access is globally disabled via {ENV_DISABLE_NETWORK} environment variable")
    validate_image_url(url, allowed_hosts=options.allowed_hosts, require_https=options.require_https)

    try:
        host = httpx.URL(url).host
    except (httpx.InvalidURL, UnicodeError) as e:
        raise ImageFetchError(f"Invalid image URL {url}: {e}", url=url, original_error=e) from e
    if not host:
        raise ImageFetchError(f"Invalid image URL {url}: missing host", url=url)


@requires_dependencies("network", DEPS_NETWORK)
async def fetch_image_bytes(url: str, options: ImageCacheOptions, transport: Any = None) -> bytes:
    """Download an image payload without blocking the event loop.

    Parameters
    ----------
    url : str
        Image URL
    options : ImageCacheOptions
        Network policy and size ceiling
    transport : httpx.AsyncBaseTransport, optional
        Transport override (e.g., ``httpx.MockTransport`` in tests)

    Returns
    -------
    bytes
        Raw payload

    Raises
    ------
    NetworkSecurityError
        If the URL or response violates the policy
    ImageFetchError
        If the request fails or the response is not an image

    """
    import httpx

    _preflight(url, options)

    async def validate_request_url(request: httpx.Request) -> None:
        validate_image_url(str(request.url), allowed_hosts=options.allowed_hosts, require_https=options.require_https)

    try:
        async with httpx.AsyncClient(
            event_hooks={"request": [validate_request_url]}, **_client_kwargs(options, transport)
        ) as client:
            async with client.stream("GET", url) as response:
                _check_response(response, url, options)
                chunks: list[bytes] = []
                total = 0
                async for chunk in response.aiter_bytes(chunk_size=NETWORK_CHUNK_SIZE):
                    total = _accumulate(chunks, chunk, total, options)
    except (NetworkSecurityError, ImageFetchError):
        raise
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as e:
        raise ImageFetchError(f"HTTP request failed for {url}: {e}", url=url, original_error=e) from e

    if total == 0:
        raise ImageFetchError("Empty response received", url=url)

    logger.debug(f"Fetched {total} bytes from {url}")
    return b"".join(chunks)


@requires_dependencies("network", DEPS_NETWORK)
def fetch_image_bytes_sync(url: str, options: ImageCacheOptions, transport: Any = None) -> bytes:
    """Blocking counterpart of :func:`fetch_image_bytes`.

    Parameters
    ----------
    url : str
        Image URL
    options : ImageCacheOptions
        Network policy and size ceiling
    transport : httpx.BaseTransport, optional
        Transport override

    Returns
    -------
    bytes
        Raw payload

    """
    import httpx

    _preflight(url, options)

    def validate_request_url(request: httpx.Request) -> None:
        validate_image_url(str(request.url), allowed_hosts=options.allowed_hosts, require_https=options.require_https)

    try:
        with httpx.Client(event_hooks={"request": [validate_request_url]}, **_client_kwargs(options, transport)) as client:
            with client.stream("GET", url) as response:
                _check_response(response, url, options)
                chunks: list[bytes] = []
                total = 0
                for chunk in response.iter_bytes(chunk_size=NETWORK_CHUNK_SIZE):
                    total = _accumulate(chunks, chunk, total, options)
    except (NetworkSecurityError, ImageFetchError):
        raise
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as e:
        raise ImageFetchError(f"HTTP request failed for {url}: {e}", url=url, original_error=e) from e

    if total == 0:
        raise ImageFetchError("Empty response received", url=url)

    logger.debug(f"Fetched {total} bytes from {url}")
    return b"".join(chunks)
