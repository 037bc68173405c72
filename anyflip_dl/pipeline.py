"""High-level orchestration: resolve a flipbook, download its pages, build the PDF."""

from __future__ import annotations

import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import requests

from . import parser, resolver
from .config import SCHEME_AUTO, SCHEME_IDENTIFIER, SCHEME_NUMERIC, DownloadOptions
from .document import create_ocr_pdf, create_pdf
from .errors import AssemblyError, RemoteError
from .fetcher import ConfigFetcher, build_session
from .images import PageDownloadError, download_pages
from .models import FlipbookDescriptor, FlipbookMetadata, FlipbookReference
from .utils import safe_filename

logger = logging.getLogger("anyflip_dl")


@dataclass
class RunResult:
    """Outcome of a completed flipbook run."""

    url: str
    output_path: Path
    page_count: int
    scheme: str
    total_seconds: float


def choose_title(
    ref: FlipbookReference,
    meta: FlipbookMetadata,
    options: DownloadOptions,
) -> str:
    """Explicit override, then the parsed title, then the document id."""
    if options.title:
        return options.title
    if options.auto_title and meta.title:
        return meta.title
    return ref.document


def describe(
    ref: FlipbookReference,
    meta: FlipbookMetadata,
    options: DownloadOptions,
    scheme: Optional[str] = None,
) -> FlipbookDescriptor:
    scheme = scheme or options.scheme
    if scheme == SCHEME_AUTO:
        scheme = resolver.select_scheme(meta)
    page_urls = resolver.resolve(ref, meta, scheme=scheme, host=options.service_host)
    return FlipbookDescriptor(
        reference=ref,
        title=choose_title(ref, meta, options),
        page_urls=page_urls,
        metadata=meta,
        scheme=scheme,
    )


def prepare_download(
    url: str,
    options: DownloadOptions,
    fetcher: Optional[ConfigFetcher] = None,
) -> FlipbookDescriptor:
    """Normalize ``url``, fetch and parse its configuration, and resolve page URLs."""
    ref = FlipbookReference.from_url(url)
    fetcher = fetcher or ConfigFetcher(
        build_session(options.insecure),
        host=options.service_host,
        timeout=options.timeout,
    )
    raw = fetcher.fetch(ref)
    meta = parser.parse(raw)
    descriptor = describe(ref, meta, options)
    logger.info(
        "Resolved %r: %d pages (%s scheme)",
        descriptor.title,
        descriptor.page_count,
        descriptor.scheme,
    )
    return descriptor


def download_with_fallback(
    descriptor: FlipbookDescriptor,
    download_dir: Path,
    session: requests.Session,
    options: DownloadOptions,
) -> Tuple[FlipbookDescriptor, List[Path]]:
    """Download pages, switching to the identifier scheme if numbered pages are missing."""
    try:
        return descriptor, download_pages(descriptor.page_urls, download_dir, session, options.timeout)
    except PageDownloadError as exc:
        can_fall_back = (
            exc.wholesale
            and isinstance(exc, RemoteError)
            and descriptor.scheme == SCHEME_NUMERIC
            and descriptor.metadata.page_identifiers
        )
        if not can_fall_back:
            raise
        logger.warning("Numbered pages unavailable (%s); retrying with page identifiers", exc)

    shutil.rmtree(download_dir, ignore_errors=True)
    fallback = describe(descriptor.reference, descriptor.metadata, options, scheme=SCHEME_IDENTIFIER)
    return fallback, download_pages(fallback.page_urls, download_dir, session, options.timeout)


def output_path_for(descriptor: FlipbookDescriptor, options: DownloadOptions) -> Path:
    return options.output_dir / (safe_filename(descriptor.title, fallback=descriptor.reference.document) + ".pdf")


def run_flipbook(url: str, options: DownloadOptions) -> RunResult:
    """Resolve, download and assemble one flipbook into a PDF."""
    start = time.perf_counter()
    session = build_session(options.insecure)
    fetcher = ConfigFetcher(session, host=options.service_host, timeout=options.timeout)
    descriptor = prepare_download(url, options, fetcher)

    output_path = output_path_for(descriptor, options)
    download_dir = options.temp_download_folder or (
        options.output_dir / safe_filename(descriptor.title, fallback=descriptor.reference.document)
    )
    work_dir = download_dir.with_name(download_dir.name + "_pdf")
    folders = [download_dir, work_dir] if options.ocr else [download_dir]
    for folder in folders:
        if folder.exists():
            raise AssemblyError(f"Folder already exists: {folder}")

    try:
        descriptor, image_paths = download_with_fallback(descriptor, download_dir, session, options)
        logger.info("Converting %d pages to PDF", len(image_paths))
        if options.ocr:
            create_ocr_pdf(image_paths, output_path, work_dir)
        else:
            create_pdf(image_paths, output_path)
    finally:
        if not options.keep_images and download_dir.exists():
            shutil.rmtree(download_dir, ignore_errors=True)

    return RunResult(
        url=url,
        output_path=output_path,
        page_count=descriptor.page_count,
        scheme=descriptor.scheme,
        total_seconds=time.perf_counter() - start,
    )
