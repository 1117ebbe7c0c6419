"""MCP server exposing the page harvester as a tool."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .config import HarvestConfig
from .harvester import run_harvest

logger = logging.getLogger("page_harvest.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="page-harvest")


@mcp.tool()
async def harvest(url: str) -> str:
    """Render a web page and return its image, video and link manifests as JSON."""

    with tempfile.TemporaryDirectory(prefix="page-harvest-") as tmp_dir:
        config = HarvestConfig(output_root=Path(tmp_dir))
        result = await run_harvest(url, config)
    return json.dumps(
        {
            "images": [record.to_json() for record in result.images],
            "videos": [record.to_json() for record in result.videos],
            "links": [record.to_json() for record in result.links],
        },
        indent=2,
        ensure_ascii=False,
    )


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
