import asyncio
import json

import pytest

from page_harvest.errors import MissingAttribute, OutputWriteError
from page_harvest.manifest import classify, write_manifest
from page_harvest.models import Extracted, ImageRecord, LinkRecord, Skipped, VideoRecord

from conftest import FakeElement


async def _collect(elements, resolver, workers=1):
    return [outcome async for outcome in classify(elements, resolver, workers=workers)]


async def _delayed_name(element):
    name = await element.attribute("name")
    if name is None:
        raise MissingAttribute("name")
    await asyncio.sleep(float(await element.attribute("delay")))
    return name


ELEMENTS = [
    FakeElement(name="slow", delay="0.05"),
    FakeElement(delay="0"),
    FakeElement(name="fast", delay="0"),
]


@pytest.mark.parametrize("workers", [1, 3])
def test_outcomes_follow_enumeration_order(workers):
    outcomes = asyncio.run(_collect(ELEMENTS, _delayed_name, workers=workers))
    assert [outcome.index for outcome in outcomes] == [0, 1, 2]
    assert outcomes[0] == Extracted(0, "slow")
    assert isinstance(outcomes[1], Skipped)
    assert isinstance(outcomes[1].reason, MissingAttribute)
    assert outcomes[2] == Extracted(2, "fast")


def test_sequential_classification_is_lazy():
    seen = []

    async def record(element):
        seen.append(await element.attribute("name"))
        return seen[-1]

    async def first_only():
        async for outcome in classify([FakeElement(name="a"), FakeElement(name="b")], record):
            return outcome

    assert asyncio.run(first_only()) == Extracted(0, "a")
    assert seen == ["a"]


def test_unexpected_errors_propagate():
    async def broken(element):
        raise RuntimeError("accessor gone")

    with pytest.raises(RuntimeError):
        asyncio.run(_collect([FakeElement()], broken))


def test_empty_category():
    assert asyncio.run(_collect([], _delayed_name, workers=4)) == []


def test_write_manifest_shapes(tmp_path):
    write_manifest(tmp_path / "images.json", [ImageRecord(src="/a.png", img="ff.png")])
    write_manifest(tmp_path / "videos.json", [VideoRecord(src="https://v/embed/x", id="x")])
    write_manifest(tmp_path / "links.json", [LinkRecord(url="https://example.com/")])
    write_manifest(tmp_path / "empty.json", [])

    assert json.loads((tmp_path / "images.json").read_text()) == [{"src": "/a.png", "img": "ff.png"}]
    assert json.loads((tmp_path / "videos.json").read_text()) == [{"src": "https://v/embed/x", "id": "x"}]
    assert json.loads((tmp_path / "links.json").read_text()) == ["https://example.com/"]
    assert json.loads((tmp_path / "empty.json").read_text()) == []


def test_write_manifest_failure_is_fatal(tmp_path):
    with pytest.raises(OutputWriteError):
        write_manifest(tmp_path / "missing" / "links.json", [])


def test_pool_cancels_pending_elements_on_unexpected_error():
    cancelled = []

    async def resolver(element):
        name = await element.attribute("name")
        if name == "bad":
            raise RuntimeError("accessor gone")
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(name)
            raise
        return name

    async def scenario():
        elements = [FakeElement(name="slow"), FakeElement(name="bad")]
        with pytest.raises(RuntimeError):
            await _collect(elements, resolver, workers=2)
        for _ in range(3):
            await asyncio.sleep(0)
        return cancelled

    assert asyncio.run(scenario()) == ["slow"]
