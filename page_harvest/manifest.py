"""Per-category extraction combinator and manifest serialization."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import (
    AsyncIterator,
    Awaitable,
    Callable,
    List,
    Sequence,
    TypeVar,
    Union,
)

from .errors import ExtractionError, OutputWriteError
from .models import Extracted, ImageRecord, LinkRecord, Outcome, Skipped, VideoRecord
from .session import ElementHandle

logger = logging.getLogger("page_harvest")

T = TypeVar("T")
Resolver = Callable[[ElementHandle], Awaitable[T]]
Record = Union[ImageRecord, VideoRecord, LinkRecord]


async def _attempt(index: int, element: ElementHandle, resolver: Resolver[T]) -> Outcome[T]:
    try:
        value = await resolver(element)
    except ExtractionError as exc:
        return Skipped(index, exc)
    return Extracted(index, value)


async def classify(
    elements: Sequence[ElementHandle],
    resolver: Resolver[T],
    workers: int = 1,
) -> AsyncIterator[Outcome[T]]:
    """Apply ``resolver`` to every element and yield outcomes in DOM order.

    With ``workers == 1`` elements are resolved one at a time as the caller
    consumes the iterator. Larger values resolve up to ``workers`` elements
    concurrently; results are still yielded in enumeration order.
    Anything other than an ``ExtractionError`` propagates and cancels the
    elements still in flight.
    """
    if workers <= 1:
        for index, element in enumerate(elements):
            yield await _attempt(index, element, resolver)
        return

    semaphore = asyncio.Semaphore(workers)

    async def bounded(index: int, element: ElementHandle) -> Outcome[T]:
        async with semaphore:
            return await _attempt(index, element, resolver)

    tasks = [
        asyncio.ensure_future(bounded(index, element))
        for index, element in enumerate(elements)
    ]
    try:
        outcomes = await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
    for outcome in outcomes:
        yield outcome


def log_skip(category: str, outcome: Skipped) -> None:
    logger.warning(
        "Skipping %s #%d: %s (%s)",
        category,
        outcome.index,
        outcome.reason,
        type(outcome.reason).__name__,
    )


def write_manifest(path: Path, records: List[Record]) -> None:
    """Serialize ``records`` as a pretty-printed JSON array at ``path``."""
    payload = [record.to_json() for record in records]
    try:
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:
        raise OutputWriteError(f"could not write manifest {path}: {exc}") from exc
    logger.info("Saved %d records to %s", len(records), path)
