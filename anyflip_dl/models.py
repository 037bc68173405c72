"""Data models used throughout the flipbook pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlparse

from .config import SERVICE_HOST
from .errors import InvalidURLError


@dataclass(frozen=True)
class FlipbookReference:
    """A flipbook identified by its host, collection id and document id."""

    host: str
    collection: str
    document: str

    @classmethod
    def from_url(cls, url: str) -> "FlipbookReference":
        return parse_reference(url)

    @property
    def path(self) -> str:
        return f"/{self.collection}/{self.document}"

    @property
    def url(self) -> str:
        return f"https://{self.host}{self.path}"


@dataclass(frozen=True)
class FlipbookMetadata:
    """Fields extracted from a flipbook's configuration resource."""

    title: Optional[str]
    page_count: int
    page_identifiers: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FlipbookDescriptor:
    """Everything the download and assembly stages need for one flipbook."""

    reference: FlipbookReference
    title: str
    page_urls: Tuple[str, ...]
    metadata: FlipbookMetadata
    scheme: str

    @property
    def page_count(self) -> int:
        return len(self.page_urls)


def parse_reference(url: str) -> FlipbookReference:
    """Reduce a flipbook URL to its host and first two path segments.

    ``https://online.anyflip.com/abcd/1234/mobile/index.html?p=2`` and
    ``online.anyflip.com/abcd/1234`` both yield ``("abcd", "1234")``.
    """
    candidate = (url or "").strip()
    if not candidate:
        raise InvalidURLError("Empty flipbook URL")
    if "://" not in candidate:
        candidate = "https://" + candidate.lstrip("/")
    parsed = urlparse(candidate)
    segments = [segment for segment in parsed.path.split("/") if segment]
    if len(segments) < 2:
        raise InvalidURLError(
            f"Expected a URL of the form https://{SERVICE_HOST}/<collection>/<document>, got {url!r}"
        )
    return FlipbookReference(
        host=parsed.netloc or SERVICE_HOST,
        collection=segments[0],
        document=segments[1],
    )
