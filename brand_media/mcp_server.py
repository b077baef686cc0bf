"""MCP server exposing the brand media collector as a tool."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from .config import PipelineInput
from .pipeline import collect_brand_media
from .platform import ApifyPlatform, DirectoryStore

logger = logging.getLogger("brand_media.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="brand-media")


@mcp.tool()
def collect_media(
    brand_name: str,
    instagram: Optional[str] = None,
    facebook: Optional[str] = None,
    tiktok: Optional[str] = None,
    google_maps: Optional[str] = None,
    google_maps_search_by_brand: bool = False,
    website: Optional[str] = None,
    keywords: Optional[List[str]] = None,
    max_media_per_source: Optional[int] = None,
) -> str:
    """Scrape a brand's profiles and return the result document as JSON."""

    request = PipelineInput.from_mapping(
        {
            "brandName": brand_name,
            "instagram": instagram,
            "facebook": facebook,
            "tiktok": tiktok,
            "googleMaps": google_maps,
            "googleMapsSearchByBrand": google_maps_search_by_brand,
            "website": website,
            "keywords": keywords or [],
            "maxMediaPerSource": max_media_per_source,
        }
    )
    platform = ApifyPlatform.from_env()
    with tempfile.TemporaryDirectory(prefix="brand-media-") as tmp_dir:
        outcome = collect_brand_media(request, platform, DirectoryStore(Path(tmp_dir)))
    return json.dumps(outcome.result.to_dict(), indent=2, ensure_ascii=False)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
