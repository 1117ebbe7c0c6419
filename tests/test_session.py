import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError

from page_harvest.config import HarvestConfig
from page_harvest.errors import NavigationError, SessionError
from page_harvest.session import PlaywrightSession, StaticSession, static_session

MARKUP = """
<html><body>
  <img src="/a.png" class="hero wide">
  <img alt="no src">
  <a href="/about">About</a>
</body></html>
"""


def test_static_session_reads_attributes():
    async def scenario():
        async with static_session(MARKUP, "https://example.com/") as session:
            images = await session.find_all("img")
            return (
                [await image.attribute("src") for image in images],
                await images[0].attribute("class"),
                await session.current_url(),
            )

    sources, classes, url = asyncio.run(scenario())
    assert sources == ["/a.png", None]
    assert classes == "hero wide"
    assert url == "https://example.com/"


def test_static_session_url_matching():
    session = StaticSession(MARKUP, "https://example.com")
    asyncio.run(session.wait_until_url_matches("https://EXAMPLE.com/"))
    asyncio.run(session.navigate("https://example.com/other"))
    with pytest.raises(NavigationError):
        asyncio.run(session.wait_until_url_matches("https://example.com/"))
    assert asyncio.run(session.page_source()) == MARKUP


class UnclosableBrowser:
    def __init__(self):
        self.close_calls = 0

    async def close(self):
        self.close_calls += 1
        raise PlaywrightError("Target page, context or browser has been closed")


def test_browser_close_failure_is_a_session_error():
    browser = UnclosableBrowser()
    session = PlaywrightSession(browser, page=None, config=HarvestConfig())

    with pytest.raises(SessionError):
        asyncio.run(session.close())
    asyncio.run(session.close())
    assert browser.close_calls == 1
