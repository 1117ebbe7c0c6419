"""Data models used throughout the harvest pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class ImageRecord:
    """Image fetched and stored under its content-addressed filename."""

    src: str
    img: str

    def to_json(self) -> Dict[str, Any]:
        return {"src": self.src, "img": self.img}


@dataclass(frozen=True)
class VideoRecord:
    """Embedded video frame and the identifier parsed from its URL."""

    src: str
    id: str

    def to_json(self) -> Dict[str, Any]:
        return {"src": self.src, "id": self.id}


@dataclass(frozen=True)
class LinkRecord:
    """Absolute URL resolved from one anchor."""

    url: str

    def to_json(self) -> str:
        return self.url


@dataclass(frozen=True)
class Extracted(Generic[T]):
    """Successful resolution of the element at ``index``."""

    index: int
    value: T


@dataclass(frozen=True)
class Skipped:
    """Element at ``index`` was rejected; ``reason`` says why."""

    index: int
    reason: Exception


Outcome = Union[Extracted[T], Skipped]
