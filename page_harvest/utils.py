"""Utility helpers for string normalization and path handling."""

from __future__ import annotations

import re
from urllib.parse import urlsplit, urlunsplit

from .errors import SiteIdentifierError

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str, fallback: str = "page") -> str:
    """Generate a filesystem-friendly slug using ASCII characters only."""
    normalized = value.encode("ascii", "ignore").decode("ascii")
    normalized = normalized.lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def site_identifier(url: str) -> str:
    """Derive the output directory name from the host of ``url``."""
    host = urlsplit(url).hostname
    if not host:
        raise SiteIdentifierError(f"cannot derive a site identifier from {url!r}")
    return slugify(host, fallback="site")


def normalize_url(url: str) -> str:
    """Normalize scheme/host case and the empty path so equal URLs compare equal."""
    parts = urlsplit(url)
    return urlunsplit(
        (
            parts.scheme.lower(),
            parts.netloc.lower(),
            parts.path or "/",
            parts.query,
            parts.fragment,
        )
    )


def same_url(left: str, right: str) -> bool:
    return normalize_url(left) == normalize_url(right)
