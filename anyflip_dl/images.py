"""Page image downloading and validation utilities."""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import urlparse

import requests
from filetype import guess

from .config import DEFAULT_TIMEOUT
from .errors import AssemblyError, FlipbookError, RemoteError, TransportError
from .fetcher import get

logger = logging.getLogger("anyflip_dl")

ALLOWED_IMAGE_TYPES = {"png", "jpg", "jpeg", "gif", "webp", "bmp", "tiff"}


class PageDownloadError(FlipbookError):
    """Raised when a page fails to download; ``page_index`` is zero-based."""

    def __init__(self, message: str, page_index: int, url: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.page_index = page_index
        self.url = url
        self.status = status

    @property
    def wholesale(self) -> bool:
        """True when not a single page had been saved yet."""
        return self.page_index == 0


class PageRemoteError(PageDownloadError, RemoteError):
    """A page answered with a non-success status."""


class PageTransportError(PageDownloadError, TransportError):
    """A page request could not complete."""


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def infer_page_extension(url: str, data: bytes) -> str:
    """Prefer the detected image type, then the URL's extension, then jpg."""
    detected = detect_image_format(data)
    if detected:
        return detected
    suffix = posixpath.splitext(urlparse(url).path)[1].lstrip(".").lower()
    return suffix or "jpg"


def page_filename(index: int, extension: str) -> str:
    return f"{index:04d}.{extension}"


def download_pages(
    page_urls: Sequence[str],
    download_dir: Path,
    session: requests.Session,
    timeout: float = DEFAULT_TIMEOUT,
) -> List[Path]:
    """Download every page in order into ``download_dir``.

    The directory is created fresh and must not exist yet. The first failing
    page aborts the whole download.
    """
    try:
        download_dir.mkdir(parents=True)
    except FileExistsError as exc:
        raise AssemblyError(f"Download folder already exists: {download_dir}") from exc

    total = len(page_urls)
    paths: List[Path] = []
    for index, url in enumerate(page_urls):
        try:
            resp = get(session, url, timeout)
        except RemoteError as exc:
            raise PageRemoteError(
                f"Page {index + 1}/{total} failed: {exc}", index, url, exc.status
            ) from exc
        except TransportError as exc:
            raise PageTransportError(f"Page {index + 1}/{total} failed: {exc}", index, url) from exc

        data = resp.content
        extension = infer_page_extension(url, data)
        if extension not in ALLOWED_IMAGE_TYPES:
            logger.warning(
                "Page %d from %s does not look like an image (Content-Type=%s)",
                index + 1,
                url,
                resp.headers.get("Content-Type", ""),
            )

        destination = download_dir / page_filename(index, extension)
        try:
            destination.write_bytes(data)
        except OSError as exc:
            raise AssemblyError(f"Failed to write page {destination}: {exc}") from exc
        paths.append(destination)
        logger.info("Downloaded page %d/%d", index + 1, total)
    return paths
