"""Video embed resolution for ``<iframe>`` elements."""

from __future__ import annotations

from typing import Tuple
from urllib.parse import urlsplit

from .config import EMBED_HOST_PREFIXES
from .errors import MalformedPath, MissingAttribute, MissingVideoId, UnrecognizedEmbedHost
from .session import ElementHandle


def parse_video_id(src: str) -> str:
    """Return the second path segment of an embed URL.

    The first segment is the provider's embed marker; query and fragment are
    ignored.
    """
    path = urlsplit(src).path
    if not path.startswith("/"):
        raise MalformedPath(f"{src!r} has no path segments")
    segments = path[1:].split("/")
    if len(segments) < 2 or not segments[1]:
        raise MissingVideoId(f"{src!r} has no video id segment")
    return segments[1]


async def resolve_video(element: ElementHandle) -> Tuple[str, str]:
    src = await element.attribute("src")
    if src is None:
        raise MissingAttribute("src")
    if not src.startswith(EMBED_HOST_PREFIXES):
        raise UnrecognizedEmbedHost(f"{src!r} is not a recognized video embed")
    return src, parse_video_id(src)
