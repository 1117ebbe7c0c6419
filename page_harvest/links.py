"""Hyperlink resolution for ``<a>`` elements."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

from requests.utils import requote_uri

from .errors import JoinError, MalformedBase, MissingAttribute
from .session import ElementHandle

ABSOLUTE_PREFIXES = ("https:", "http:")


def join_link(base_url: str, href: str) -> str:
    """Join ``href`` onto ``base_url`` and percent-encode the result."""
    base = urlsplit(base_url)
    if not base.scheme or not base.netloc:
        raise MalformedBase(f"cannot resolve links against {base_url!r}")
    try:
        return requote_uri(urljoin(base_url, href))
    except ValueError as exc:
        raise JoinError(f"cannot join {href!r} onto {base_url}: {exc}") from exc


async def resolve_link(element: ElementHandle, base_url: str) -> str:
    href = await element.attribute("href")
    if href is None:
        raise MissingAttribute("href")
    if href.startswith(ABSOLUTE_PREFIXES):
        return href
    return join_link(base_url, href)
