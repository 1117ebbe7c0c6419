"""Page accessors: the handle the harvester uses to read a rendered page."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Protocol, Sequence

from bs4 import BeautifulSoup, Tag
from playwright.async_api import (
    Browser,
    ElementHandle as PlaywrightElementHandle,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from .config import HarvestConfig
from .errors import (
    AttributeReadError,
    EnumerationError,
    NavigationError,
    SessionError,
)
from .utils import same_url

logger = logging.getLogger("page_harvest")


class ElementHandle(Protocol):
    async def attribute(self, name: str) -> Optional[str]:
        ...


class PageSession(Protocol):
    async def navigate(self, url: str) -> None:
        ...

    async def wait_until_url_matches(self, url: str) -> None:
        ...

    async def current_url(self) -> str:
        ...

    async def page_source(self) -> str:
        ...

    async def find_all(self, selector: str) -> Sequence[ElementHandle]:
        ...

    async def close(self) -> None:
        ...


class PlaywrightElement:
    """Element handle backed by a live Playwright page."""

    def __init__(self, handle: PlaywrightElementHandle) -> None:
        self._handle = handle

    async def attribute(self, name: str) -> Optional[str]:
        try:
            return await self._handle.get_attribute(name)
        except PlaywrightError as exc:
            raise AttributeReadError(f"could not read {name!r}: {exc}") from exc


class PlaywrightSession:
    """Page accessor driving one browser page through Playwright."""

    def __init__(self, browser: Browser, page: Page, config: HarvestConfig) -> None:
        self._browser = browser
        self._page = page
        self._config = config
        self._closed = False

    async def navigate(self, url: str) -> None:
        try:
            logger.info("Loading %s", url)
            await self._page.goto(url)
            if self._config.wait_after_load:
                await self._page.wait_for_timeout(int(self._config.wait_after_load * 1000))
        except PlaywrightError as exc:
            raise NavigationError(f"could not load {url}: {exc}") from exc

    async def wait_until_url_matches(self, url: str) -> None:
        try:
            await self._page.wait_for_url(lambda current: same_url(current, url))
        except PlaywrightError as exc:
            raise NavigationError(
                f"page never reached {url} (currently at {self._page.url}): {exc}"
            ) from exc

    async def current_url(self) -> str:
        return self._page.url

    async def page_source(self) -> str:
        try:
            return await self._page.content()
        except PlaywrightError as exc:
            raise SessionError(f"could not read page markup: {exc}") from exc

    async def find_all(self, selector: str) -> List[PlaywrightElement]:
        try:
            handles = await self._page.query_selector_all(selector)
        except PlaywrightError as exc:
            raise EnumerationError(f"could not enumerate {selector!r}: {exc}") from exc
        return [PlaywrightElement(handle) for handle in handles]

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._browser.close()
        except PlaywrightError as exc:
            raise SessionError(f"could not close the browser: {exc}") from exc


async def _open_browser(playwright: Playwright, config: HarvestConfig) -> Browser:
    if config.connect_endpoint:
        logger.debug("Connecting to remote browser at %s", config.connect_endpoint)
        return await playwright.chromium.connect(config.connect_endpoint)
    return await playwright.chromium.launch(headless=True)


@asynccontextmanager
async def playwright_session(config: HarvestConfig) -> AsyncIterator[PlaywrightSession]:
    """Open a browser page and close it on every exit path."""
    try:
        playwright = await async_playwright().start()
    except PlaywrightError as exc:
        raise SessionError(f"could not start Playwright: {exc}") from exc
    try:
        try:
            browser = await _open_browser(playwright, config)
            page = await browser.new_page(user_agent=config.user_agent)
        except PlaywrightError as exc:
            raise SessionError(f"could not open a browser page: {exc}") from exc
        page.set_default_navigation_timeout(config.navigation_timeout * 1000)
        page.set_default_timeout(config.navigation_timeout * 1000)
        session = PlaywrightSession(browser, page, config)
        try:
            yield session
        finally:
            await session.close()
    finally:
        try:
            await playwright.stop()
        except PlaywrightError as exc:
            raise SessionError(f"could not stop Playwright: {exc}") from exc


class StaticElement:
    """Element handle over a parsed BeautifulSoup tag."""

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    async def attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value


class StaticSession:
    """Page accessor over markup that was saved from ``url``.

    Navigation only moves the reported URL; no network access happens.
    """

    def __init__(self, markup: str, url: str) -> None:
        self._markup = markup
        self._soup = BeautifulSoup(markup, "html.parser")
        self._url = url

    async def navigate(self, url: str) -> None:
        self._url = url

    async def wait_until_url_matches(self, url: str) -> None:
        if not same_url(self._url, url):
            raise NavigationError(f"page is at {self._url}, expected {url}")

    async def current_url(self) -> str:
        return self._url

    async def page_source(self) -> str:
        return self._markup

    async def find_all(self, selector: str) -> List[StaticElement]:
        return [StaticElement(tag) for tag in self._soup.select(selector)]

    async def close(self) -> None:
        return None


@asynccontextmanager
async def static_session(markup: str, url: str) -> AsyncIterator[StaticSession]:
    session = StaticSession(markup, url)
    try:
        yield session
    finally:
        await session.close()
