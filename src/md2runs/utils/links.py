#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/md2runs/utils/links.py
"""Link destination resolution and URI validation.

Link destinations are either used verbatim or, when they point at an internal
entity route (``/user/<id>`` by default), rewritten into a synthetic
``mention://<id>`` URI plus an entity-mention attribute. Parsing failures are
never raised: callers get None and omit the attribute.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from md2runs.constants import DEFAULT_MENTION_ROUTE_PREFIX, DEFAULT_MENTION_SCHEME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedLink:
    """Result of resolving a link destination.

    Parameters
    ----------
    target : str or None
        URI to attach as the run's link target; None when there is no usable target
    mention : str or None
        Entity identifier when the destination is an entity route

    """

    target: Optional[str] = None
    mention: Optional[str] = None


def is_valid_uri(value: Optional[str]) -> bool:
    """Return True if ``value`` parses as a URI reference.

    A valid value is non-empty, contains no whitespace or control characters,
    and survives ``urlsplit`` including port parsing. Relative references such
    as ``/user/42`` are accepted.

    Parameters
    ----------
    value : str or None
        Candidate URI

    Returns
    -------
    bool
        True when the URI can be attached to a run

    """
    if not value:
        return False
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in value):
        return False
    try:
        parts = urlsplit(value)
        # Accessing .port validates the port component
        _ = parts.port
    except ValueError:
        return False
    if parts.scheme and not (parts.netloc or parts.path or parts.query):
        return False
    return True


def mention_id_from_destination(destination: str, route_prefix: str = DEFAULT_MENTION_ROUTE_PREFIX) -> Optional[str]:
    """Extract the entity identifier from an entity-route destination.

    Parameters
    ----------
    destination : str
        Link destination, e.g. ``/user/664c2f2a?profile-tab=profile``
    route_prefix : str, default "/user/"
        Route prefix identifying entity links; empty disables detection

    Returns
    -------
    str or None
        The last path segment (``664c2f2a``), or None when the destination is
        not an entity route or the segment is empty

    """
    if not route_prefix or not destination.startswith(route_prefix):
        return None
    path = destination.split("?", 1)[0]
    entity_id = path.rsplit("/", 1)[-1]
    return entity_id or None


def resolve_link_destination(
    destination: Optional[str],
    route_prefix: str = DEFAULT_MENTION_ROUTE_PREFIX,
    scheme: str = DEFAULT_MENTION_SCHEME,
) -> ResolvedLink:
    """Resolve a link destination into a link target and optional mention.

    Parameters
    ----------
    destination : str or None
        Destination as written in the document
    route_prefix : str, default "/user/"
        Route prefix identifying entity links
    scheme : str, default "mention"
        Scheme of the synthetic URI built for entity links

    Returns
    -------
    ResolvedLink
        ``target`` is ``"{scheme}://{id}"`` for entity links, the destination
        itself when it is a valid URI, and None otherwise

    Examples
    --------
        >>> resolve_link_destination("/user/42?tab=profile")
        ResolvedLink(target='mention://42', mention='42')
        >>> resolve_link_destination("https://example.com")
        ResolvedLink(target='https://example.com', mention=None)

    """
    if destination is None:
        return ResolvedLink()

    entity_id = mention_id_from_destination(destination, route_prefix)
    if entity_id is not None:
        synthetic = f"{scheme}://{entity_id}"
        if is_valid_uri(synthetic):
            return ResolvedLink(target=synthetic, mention=entity_id)
        # The id still identifies the entity even if it cannot form a URI
        logger.debug(f"Mention id {entity_id!r} does not form a valid URI; omitting link target")
        return ResolvedLink(target=None, mention=entity_id)

    if is_valid_uri(destination):
        return ResolvedLink(target=destination)

    logger.debug(f"Dropping unparsable link destination: {destination!r}")
    return ResolvedLink()


def mention_id_from_url(url: Optional[str], scheme: str = DEFAULT_MENTION_SCHEME) -> Optional[str]:
    """Return the entity id carried by a synthetic mention URI.

    Display layers call this when a link is activated: a ``mention://<id>``
    target opens the entity, anything else is handled as a normal URL.

    Parameters
    ----------
    url : str or None
        Activated link target
    scheme : str, default "mention"
        Synthetic mention scheme

    Returns
    -------
    str or None
        The entity id, or None for any other URI

    """
    if not url:
        return None
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if parts.scheme.lower() != scheme.lower():
        return None
    return parts.netloc or None
