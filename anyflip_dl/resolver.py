"""Compute the ordered page asset URLs for a flipbook."""

from __future__ import annotations

import posixpath
from typing import Optional, Tuple
from urllib.parse import quote

from .config import (
    IDENTIFIER_PAGE_DIR,
    NUMERIC_PAGE_DIR,
    SCHEME_AUTO,
    SCHEME_IDENTIFIER,
    SCHEME_NUMERIC,
    SERVICE_HOST,
)
from .errors import ParseError
from .models import FlipbookMetadata, FlipbookReference


def select_scheme(meta: FlipbookMetadata) -> str:
    """Uploads that list page identifiers use them, everything else is numbered."""
    return SCHEME_IDENTIFIER if meta.page_identifiers else SCHEME_NUMERIC


def asset_url(host: str, ref: FlipbookReference, *parts: str) -> str:
    path = posixpath.normpath(posixpath.join(ref.path, *parts))
    return f"https://{host}{quote(path)}"


def numeric_urls(ref: FlipbookReference, page_count: int, host: str = SERVICE_HOST) -> Tuple[str, ...]:
    return tuple(
        asset_url(host, ref, *NUMERIC_PAGE_DIR, f"{page}.jpg")
        for page in range(1, page_count + 1)
    )


def identifier_urls(
    ref: FlipbookReference,
    meta: FlipbookMetadata,
    host: str = SERVICE_HOST,
) -> Tuple[str, ...]:
    identifiers = meta.page_identifiers
    if not identifiers:
        raise ParseError("No page identifiers available for the identifier scheme")
    if len(identifiers) < meta.page_count:
        raise ParseError(
            f"Configuration lists {len(identifiers)} page identifiers "
            f"but {meta.page_count} pages"
        )
    return tuple(
        asset_url(host, ref, *IDENTIFIER_PAGE_DIR, identifiers[index])
        for index in range(meta.page_count)
    )


def resolve(
    ref: FlipbookReference,
    meta: FlipbookMetadata,
    scheme: Optional[str] = None,
    host: str = SERVICE_HOST,
) -> Tuple[str, ...]:
    """Return one URL per page, first page first.

    ``scheme`` defaults to :func:`select_scheme`; passing ``"numeric"`` or
    ``"identifier"`` forces one. URLs are not checked for reachability.
    """
    if scheme is None or scheme == SCHEME_AUTO:
        scheme = select_scheme(meta)
    if scheme == SCHEME_NUMERIC:
        return numeric_urls(ref, meta.page_count, host)
    if scheme == SCHEME_IDENTIFIER:
        return identifier_urls(ref, meta, host)
    raise ValueError(f"Unknown page URL scheme: {scheme}")
