from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Union

import pytest

from page_harvest.errors import FetchError, NavigationError
from page_harvest.utils import same_url


class FakeElement:
    def __init__(self, **attrs: str) -> None:
        self.attrs = attrs

    async def attribute(self, name: str) -> Optional[str]:
        return self.attrs.get(name)


class FakeSession:
    """In-memory page accessor that records how it was used."""

    def __init__(
        self,
        url: str,
        elements: Optional[Dict[str, List[FakeElement]]] = None,
        markup: str = "<html></html>",
        redirect_to: Optional[str] = None,
    ) -> None:
        self.url = url
        self.elements = elements or {}
        self.markup = markup
        self.redirect_to = redirect_to
        self.closed = 0
        self.selectors: List[str] = []

    async def navigate(self, url: str) -> None:
        self.url = self.redirect_to or url

    async def wait_until_url_matches(self, url: str) -> None:
        if not same_url(self.url, url):
            raise NavigationError(f"stuck at {self.url}")

    async def current_url(self) -> str:
        return self.url

    async def page_source(self) -> str:
        return self.markup

    async def find_all(self, selector: str) -> List[FakeElement]:
        self.selectors.append(selector)
        return list(self.elements.get(selector, []))

    async def close(self) -> None:
        self.closed += 1

    def factory(self):
        @asynccontextmanager
        async def open_session():
            try:
                yield self
            finally:
                await self.close()

        return open_session


class FakeFetcher:
    """Serves bytes for known URLs; an int value is returned as an HTTP status."""

    def __init__(self, responses: Optional[Dict[str, Union[bytes, int]]] = None) -> None:
        self.responses = responses or {}
        self.requested: List[str] = []

    async def fetch(self, url: str) -> bytes:
        self.requested.append(url)
        body = self.responses.get(url, 404)
        if isinstance(body, int):
            raise FetchError(url, status=body)
        return body


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()
