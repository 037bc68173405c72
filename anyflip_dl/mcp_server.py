"""MCP server exposing flipbook describe/download tools."""

from __future__ import annotations

import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .config import DownloadOptions
from .pipeline import prepare_download, run_flipbook

logger = logging.getLogger("anyflip_dl.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="anyflip-dl")


@mcp.tool()
def describe_flipbook(url: str) -> str:
    """Return a flipbook's title followed by one page image URL per line."""

    descriptor = prepare_download(url, DownloadOptions(ocr=False))
    lines = [f"# {descriptor.title}", ""]
    lines.extend(descriptor.page_urls)
    return "\n".join(lines) + "\n"


@mcp.tool()
def download_flipbook(url: str, output_dir: str = ".", ocr: bool = False) -> str:
    """Download a flipbook as PDF and return the path of the written file."""

    options = DownloadOptions(
        ocr=ocr,
        output_dir=Path(output_dir).expanduser().resolve(),
    )
    result = run_flipbook(url, options)
    return str(result.output_path)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
