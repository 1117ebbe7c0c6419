"""Configuration objects and constants for the harvester."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:141.0) Gecko/20100101 Firefox/141.0"
)

ALLOWED_IMAGE_EXTENSIONS = (".jpg", ".png", ".webp")
EMBED_HOST_PREFIXES = (
    "https://www.youtube.com/embed/",
    "https://www.youtube-nocookie.com/embed/",
)

IF_EXISTS_FAIL = "fail"
IF_EXISTS_REUSE = "reuse"
IF_EXISTS_REPLACE = "replace"
IF_EXISTS_CHOICES = (IF_EXISTS_FAIL, IF_EXISTS_REUSE, IF_EXISTS_REPLACE)


@dataclass
class HarvestConfig:
    """Top-level settings that control a single-page harvest."""

    output_root: Path = Path("output")
    navigation_timeout: float = 30.0
    wait_after_load: float = 0.0
    fetch_timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT
    connect_endpoint: Optional[str] = None
    image_workers: int = 1
    if_exists: str = IF_EXISTS_FAIL
    snapshot_name: str = "index.html"
