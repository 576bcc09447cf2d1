"""NodeInfo discovery for fediverse domains.

Resolves a domain to the software it runs using the two-hop NodeInfo protocol:
the well-known discovery document at https://{domain}/.well-known/nodeinfo links
to a versioned NodeInfo document, which carries the software name and version.
Results are memoized in a SoftwareCache.
"""

import asyncio
import logging
import re
from typing import Any, Optional
from urllib.parse import urlsplit

from aiohttp import ClientError, ClientSession
from pydantic import ValidationError
import sentry_sdk

from social.graze.fedinfo.errors import FetchError, InvalidInput, MissingParameter
from social.graze.fedinfo.model.software import (
    NODEINFO_SCHEMA_20,
    NODEINFO_SCHEMA_21,
    WELL_KNOWN_NODEINFO_PATH,
    NodeInfo,
    SoftwareIdentity,
    VersionedNodeInfo,
    WellKnownNodeInfo,
)
from social.graze.fedinfo.resolve.cache import SoftwareCache

logger = logging.getLogger(__name__)

_CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f]")
_BAD_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def normalize_domain(domain: Optional[str]) -> str:
    """Reduce user input to the host name used as the cache key.

    Input may be a bare host (``example.social``) or a URL
    (``https://example.social/about``). A bare host parses with no network
    location and ends up entirely in the path component, so the path is used in
    that case. A bare ``host:port`` keeps both host and port.

    Args:
        domain: Raw domain string supplied by the caller

    Returns:
        The normalized domain

    Raises:
        MissingParameter: If the input is empty
        InvalidInput: If the input cannot be parsed as a URI
    """
    if domain is None:
        raise MissingParameter("domain")
    domain = domain.strip()
    if len(domain) == 0:
        raise MissingParameter("domain")

    # urlsplit is lenient, reject what a strict URI parser would refuse.
    if (
        domain.startswith(":")
        or _CONTROL_CHARACTERS.search(domain)
        or _BAD_PERCENT_ESCAPE.search(domain)
    ):
        raise InvalidInput(domain)

    try:
        parsed = urlsplit(domain)
        # "host:port" reads as scheme "host" and path "port", keep the host.
        if parsed.scheme not in ("", "http", "https") and not parsed.netloc:
            parsed = urlsplit(f"//{domain}")
        _ = parsed.port
    except ValueError as e:
        raise InvalidInput(domain) from e

    host = parsed.netloc.rpartition("@")[2]
    normalized = host if host else parsed.path
    if len(normalized) == 0:
        raise InvalidInput(domain)
    return normalized


def parse_discovery_document(payload: Any) -> WellKnownNodeInfo:
    """Decode a well-known discovery payload into its list of links.

    Raises:
        pydantic.ValidationError: If the payload is not a discovery document
    """
    return WellKnownNodeInfo.model_validate(payload)


def select_nodeinfo_href(document: WellKnownNodeInfo) -> Optional[str]:
    """Pick the versioned NodeInfo document to fetch.

    Links are scanned in document order. The first 2.1 link wins outright; a 2.0
    link is only used when the document has no 2.1 link at all.

    Args:
        document: Parsed discovery document

    Returns:
        The href of the preferred link, or None if no recognized schema is linked
    """
    candidate: Optional[str] = None
    for link in document.links:
        if link.rel == NODEINFO_SCHEMA_21:
            return link.href
        if link.rel == NODEINFO_SCHEMA_20 and candidate is None:
            candidate = link.href
    return candidate


def parse_software(payload: Any) -> SoftwareIdentity:
    """Extract the software block from a NodeInfo 2.0 or 2.1 payload.

    Raises:
        pydantic.ValidationError: If the payload is not a NodeInfo document
    """
    return VersionedNodeInfo.model_validate(payload).software


async def fetch_json(session: ClientSession, url: str) -> Any:
    """Fetch a URL once and decode its body as JSON.

    Args:
        session: HTTP client session
        url: URL to fetch

    Returns:
        The decoded JSON body

    Raises:
        FetchError: On network failure, a non-200 status or a body that is not JSON
    """
    try:
        async with session.get(url) as resp:
            if resp.status != 200:
                raise FetchError(url, f"unexpected status {resp.status}")
            # Servers label NodeInfo with assorted profile content types.
            return await resp.json(content_type=None)
    except (ClientError, asyncio.TimeoutError, ValueError) as e:
        sentry_sdk.capture_exception(e)
        raise FetchError(url, str(e) or type(e).__name__) from e


async def fetch_discovery_document(
    session: ClientSession, domain: str
) -> WellKnownNodeInfo:
    """Fetch and decode https://{domain}/.well-known/nodeinfo.

    Raises:
        FetchError: If the document cannot be fetched or decoded
    """
    url = f"https://{domain}{WELL_KNOWN_NODEINFO_PATH}"
    payload = await fetch_json(session, url)
    try:
        return parse_discovery_document(payload)
    except ValidationError as e:
        raise FetchError(url, "malformed discovery document") from e


async def fetch_software(session: ClientSession, href: str) -> SoftwareIdentity:
    """Fetch a versioned NodeInfo document and extract its software identity.

    Raises:
        FetchError: If the document cannot be fetched or decoded
    """
    payload = await fetch_json(session, href)
    try:
        return parse_software(payload)
    except ValidationError as e:
        raise FetchError(href, "malformed nodeinfo document") from e


async def resolve_domain(
    session: ClientSession, cache: SoftwareCache, domain: Optional[str]
) -> NodeInfo:
    """Resolve a domain to the software it runs.

    Fresh cache entries are returned without network access. On a miss the
    discovery document is fetched, the preferred versioned document is fetched
    from it, and the extracted identity is cached. A domain that links no
    recognized NodeInfo schema resolves to an empty identity and is not cached.

    Args:
        session: HTTP client session
        cache: Cache consulted before and populated after discovery
        domain: Raw domain string, with or without a scheme

    Returns:
        NodeInfo for the normalized domain

    Raises:
        MissingParameter: If the domain is empty
        InvalidInput: If the domain cannot be parsed
        FetchError: If either discovery hop fails
    """
    domain = normalize_domain(domain)

    software, found = cache.get(domain)
    if found:
        return NodeInfo(domain=domain, software=software)

    logger.debug("cache miss for %s, starting discovery", domain)
    document = await fetch_discovery_document(session, domain)
    href = select_nodeinfo_href(document)
    if not href:
        logger.info("%s does not link a supported nodeinfo schema", domain)
        return NodeInfo(domain=domain)

    software = await fetch_software(session, href)
    cache.set(domain, software)
    return NodeInfo(domain=domain, software=software)
