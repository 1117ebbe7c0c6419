"""Image resolution and content-addressed naming."""

from __future__ import annotations

import hashlib
from typing import Tuple
from urllib.parse import urljoin

from .config import ALLOWED_IMAGE_EXTENSIONS
from .errors import (
    JoinError,
    MissingAttribute,
    MissingExtensionSeparator,
    UnsupportedExtension,
    UnsupportedScheme,
)
from .fetcher import ByteFetcher
from .session import ElementHandle

INLINE_SCHEME = "data:"
ABSOLUTE_PREFIXES = ("http:", "https:")


def _check_extension(src: str) -> None:
    if not src.endswith(ALLOWED_IMAGE_EXTENSIONS):
        raise UnsupportedExtension(
            f"{src!r} does not end with one of {', '.join(ALLOWED_IMAGE_EXTENSIONS)}"
        )


async def resolve_image(
    element: ElementHandle,
    base_url: str,
    fetcher: ByteFetcher,
) -> Tuple[str, bytes]:
    """Validate an ``<img>`` element and fetch the bytes behind its ``src``."""
    src = await element.attribute("src")
    if src is None:
        raise MissingAttribute("src")
    if src.startswith(INLINE_SCHEME):
        raise UnsupportedScheme("inline data URIs cannot be fetched")
    _check_extension(src)

    url = src
    if not src.startswith(ABSOLUTE_PREFIXES):
        try:
            url = urljoin(base_url, src)
        except ValueError as exc:
            raise JoinError(f"cannot join {src!r} onto {base_url}: {exc}") from exc
    data = await fetcher.fetch(url)
    return src, data


def rename_image(src: str) -> str:
    """Map an image source string to ``<sha256 hex>.<extension>``.

    The digest covers the source string, not the image bytes, so the same
    ``src`` always lands on the same file.
    """
    _check_extension(src)
    if "." not in src:
        raise MissingExtensionSeparator(f"{src!r} has no extension separator")
    extension = src.rsplit(".", 1)[1]
    digest = hashlib.sha256(src.encode("utf-8")).hexdigest()
    return f"{digest}.{extension}"
