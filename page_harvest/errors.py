"""Exception types raised while harvesting a page.

Two families exist. ``ExtractionError`` covers a single element that could
not be turned into a record; the harvester logs it and moves on.
``HarvestError`` covers everything that ends the run.
"""

from __future__ import annotations

from typing import Optional


class ExtractionError(Exception):
    """A single element was skipped."""


class MissingAttribute(ExtractionError):
    def __init__(self, attribute: str) -> None:
        super().__init__(f"missing {attribute!r} attribute")
        self.attribute = attribute


class AttributeReadError(ExtractionError):
    """The page accessor failed while reading an attribute."""


class UnsupportedScheme(ExtractionError):
    pass


class UnsupportedExtension(ExtractionError):
    pass


class MissingExtensionSeparator(ExtractionError):
    pass


class FetchError(ExtractionError):
    def __init__(self, url: str, status: Optional[int] = None, reason: str = "") -> None:
        detail = f"HTTP {status}" if status is not None else (reason or "request failed")
        super().__init__(f"could not fetch {url}: {detail}")
        self.url = url
        self.status = status


class UnrecognizedEmbedHost(ExtractionError):
    pass


class MalformedPath(ExtractionError):
    pass


class MissingVideoId(ExtractionError):
    pass


class MalformedBase(ExtractionError):
    pass


class JoinError(ExtractionError):
    pass


class HarvestError(Exception):
    """Fatal error; the run is aborted."""


class SessionError(HarvestError):
    pass


class NavigationError(HarvestError):
    pass


class SiteIdentifierError(HarvestError):
    pass


class OutputDirectoryError(HarvestError):
    pass


class EnumerationError(HarvestError):
    pass


class OutputWriteError(HarvestError):
    pass
