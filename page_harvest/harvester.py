"""High-level orchestration for harvesting one rendered page."""

from __future__ import annotations

import enum
import logging
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncContextManager, Callable, List, Optional, Set, Tuple

from .config import IF_EXISTS_CHOICES, IF_EXISTS_FAIL, IF_EXISTS_REPLACE, HarvestConfig
from .errors import OutputDirectoryError, OutputWriteError
from .fetcher import ByteFetcher, RequestsFetcher
from .images import rename_image, resolve_image
from .links import resolve_link
from .manifest import classify, log_skip, write_manifest
from .models import ImageRecord, LinkRecord, Skipped, VideoRecord
from .session import ElementHandle, PageSession, playwright_session
from .utils import site_identifier
from .videos import resolve_video

logger = logging.getLogger("page_harvest")

SessionFactory = Callable[[], AsyncContextManager[PageSession]]

IMAGES_MANIFEST = "images.json"
VIDEOS_MANIFEST = "videos.json"
LINKS_MANIFEST = "links.json"


class HarvestState(enum.Enum):
    INIT = "init"
    SESSION_ESTABLISHED = "session-established"
    NAVIGATED = "navigated"
    IMAGES_DONE = "images-done"
    VIDEOS_DONE = "videos-done"
    LINKS_DONE = "links-done"
    SNAPSHOT_SAVED = "snapshot-saved"
    CLOSED = "closed"
    ABORTED = "aborted"


@dataclass
class HarvestResult:
    """Records written for one page, in DOM order."""

    target: str
    output_dir: Path
    images: List[ImageRecord] = field(default_factory=list)
    videos: List[VideoRecord] = field(default_factory=list)
    links: List[LinkRecord] = field(default_factory=list)
    skipped: int = 0
    total_seconds: float = 0.0


def prepare_output_dir(output_root: Path, name: str, if_exists: str = IF_EXISTS_FAIL) -> Path:
    """Create ``output_root/name`` according to the existing-directory policy.

    ``fail`` refuses an existing directory, ``reuse`` writes into it and
    ``replace`` deletes it first.
    """
    if if_exists not in IF_EXISTS_CHOICES:
        raise ValueError(f"unknown existing-directory policy {if_exists!r}")
    output_dir = output_root / name
    try:
        if if_exists == IF_EXISTS_REPLACE and output_dir.exists():
            logger.info("Replacing existing output directory %s", output_dir)
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True, exist_ok=if_exists != IF_EXISTS_FAIL)
    except FileExistsError as exc:
        raise OutputDirectoryError(f"output directory {output_dir} already exists") from exc
    except OSError as exc:
        raise OutputDirectoryError(f"could not create {output_dir}: {exc}") from exc
    return output_dir


def write_asset(path: Path, data: bytes) -> None:
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise OutputWriteError(f"could not write {path}: {exc}") from exc


class Harvester:
    """Drive one page through images, videos, links and the markup snapshot.

    Per-element failures are logged and skipped. Session, directory and
    write failures abort the run; the session is released either way.
    """

    def __init__(
        self,
        target: str,
        config: HarvestConfig,
        session_factory: Optional[SessionFactory] = None,
        fetcher: Optional[ByteFetcher] = None,
    ) -> None:
        self.target = target
        self.config = config
        self.session_factory = session_factory or (lambda: playwright_session(config))
        self.fetcher = fetcher
        self.state = HarvestState.INIT

    def _advance(self, state: HarvestState) -> None:
        logger.debug("State %s -> %s", self.state.value, state.value)
        self.state = state

    async def run(self) -> HarvestResult:
        start = time.perf_counter()
        owned_fetcher: Optional[RequestsFetcher] = None
        fetcher = self.fetcher
        if fetcher is None:
            owned_fetcher = RequestsFetcher(
                user_agent=self.config.user_agent, timeout=self.config.fetch_timeout
            )
            fetcher = owned_fetcher

        try:
            name = site_identifier(self.target)
            async with self.session_factory() as session:
                self._advance(HarvestState.SESSION_ESTABLISHED)
                await session.navigate(self.target)
                await session.wait_until_url_matches(self.target)
                base_url = await session.current_url()
                self._advance(HarvestState.NAVIGATED)

                output_dir = prepare_output_dir(
                    self.config.output_root, name, self.config.if_exists
                )
                result = HarvestResult(target=self.target, output_dir=output_dir)

                result.images = await self._harvest_images(
                    session, base_url, fetcher, result
                )
                self._advance(HarvestState.IMAGES_DONE)
                result.videos = await self._harvest_videos(session, result)
                self._advance(HarvestState.VIDEOS_DONE)
                result.links = await self._harvest_links(session, result)
                self._advance(HarvestState.LINKS_DONE)

                self._save_snapshot(output_dir, await session.page_source())
                self._advance(HarvestState.SNAPSHOT_SAVED)
        except Exception:
            self._advance(HarvestState.ABORTED)
            raise
        finally:
            if owned_fetcher is not None:
                owned_fetcher.close()

        self._advance(HarvestState.CLOSED)
        result.total_seconds = time.perf_counter() - start
        logger.info(
            "Done: %d images, %d videos, %d links (%d skipped) in %.2fs -> %s",
            len(result.images),
            len(result.videos),
            len(result.links),
            result.skipped,
            result.total_seconds,
            result.output_dir,
        )
        return result

    async def _harvest_images(
        self,
        session: PageSession,
        base_url: str,
        fetcher: ByteFetcher,
        result: HarvestResult,
    ) -> List[ImageRecord]:
        async def resolve(element: ElementHandle) -> Tuple[str, bytes, str]:
            src, data = await resolve_image(element, base_url, fetcher)
            return src, data, rename_image(src)

        elements = await session.find_all("img")
        logger.debug("Found %d image elements", len(elements))
        records: List[ImageRecord] = []
        written: Set[str] = set()
        async for outcome in classify(elements, resolve, workers=self.config.image_workers):
            if isinstance(outcome, Skipped):
                log_skip("image", outcome)
                result.skipped += 1
                continue
            src, data, filename = outcome.value
            if filename not in written:
                write_asset(result.output_dir / filename, data)
                written.add(filename)
            records.append(ImageRecord(src=src, img=filename))

        write_manifest(result.output_dir / IMAGES_MANIFEST, records)
        return records

    async def _harvest_videos(
        self, session: PageSession, result: HarvestResult
    ) -> List[VideoRecord]:
        elements = await session.find_all("iframe")
        logger.debug("Found %d iframe elements", len(elements))
        records: List[VideoRecord] = []
        async for outcome in classify(elements, resolve_video):
            if isinstance(outcome, Skipped):
                log_skip("video", outcome)
                result.skipped += 1
                continue
            src, video_id = outcome.value
            records.append(VideoRecord(src=src, id=video_id))

        write_manifest(result.output_dir / VIDEOS_MANIFEST, records)
        return records

    async def _harvest_links(
        self, session: PageSession, result: HarvestResult
    ) -> List[LinkRecord]:
        base_url = await session.current_url()

        async def resolve(element: ElementHandle) -> str:
            return await resolve_link(element, base_url)

        elements = await session.find_all("a")
        logger.debug("Found %d anchor elements", len(elements))
        records: List[LinkRecord] = []
        async for outcome in classify(elements, resolve):
            if isinstance(outcome, Skipped):
                log_skip("link", outcome)
                result.skipped += 1
                continue
            records.append(LinkRecord(url=outcome.value))

        write_manifest(result.output_dir / LINKS_MANIFEST, records)
        return records

    def _save_snapshot(self, output_dir: Path, html: str) -> None:
        path = output_dir / self.config.snapshot_name
        try:
            path.write_text(html, encoding="utf-8")
        except OSError as exc:
            raise OutputWriteError(f"could not write snapshot {path}: {exc}") from exc
        logger.info("Saved page snapshot to %s", path)


async def run_harvest(
    target: str,
    config: HarvestConfig,
    session_factory: Optional[SessionFactory] = None,
    fetcher: Optional[ByteFetcher] = None,
) -> HarvestResult:
    """Harvest ``target`` into ``config.output_root``."""
    harvester = Harvester(target, config, session_factory=session_factory, fetcher=fetcher)
    return await harvester.run()
