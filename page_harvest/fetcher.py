"""Byte fetching for image assets."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

import requests

from .config import DEFAULT_USER_AGENT
from .errors import FetchError

logger = logging.getLogger("page_harvest")


class ByteFetcher(Protocol):
    async def fetch(self, url: str) -> bytes:
        ...


class RequestsFetcher:
    """Fetch absolute URLs with a shared ``requests.Session``.

    Any non-2xx status or transport failure raises ``FetchError``. Requests
    are made once; there is no retry.
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def fetch_sync(self, url: str) -> bytes:
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(url, reason=str(exc)) from exc
        if not resp.ok:
            raise FetchError(url, status=resp.status_code)
        logger.debug("Fetched %s (%d bytes)", url, len(resp.content))
        return resp.content

    async def fetch(self, url: str) -> bytes:
        return await asyncio.to_thread(self.fetch_sync, url)

    def close(self) -> None:
        self.session.close()
