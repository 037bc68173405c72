"""Command-line entry point for the flipbook downloader."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Sequence

from .config import DEFAULT_TIMEOUT, SCHEME_AUTO, SCHEME_CHOICES, SERVICE_HOST, DownloadOptions
from .errors import FlipbookError
from .pipeline import prepare_download, run_flipbook

logger = logging.getLogger("anyflip_dl.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first in ("-h", "--help"):
        return argv
    return ("download", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", help="Flipbook URL, e.g. https://online.anyflip.com/abcd/1234")
    parser.add_argument(
        "--title",
        default=None,
        help="Name of the generated PDF document (uses the book title if not specified)",
    )
    parser.add_argument(
        "--auto-title",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Read the book title from the flipbook configuration",
    )
    parser.add_argument(
        "--scheme",
        choices=SCHEME_CHOICES,
        default=SCHEME_AUTO,
        help="Page URL scheme; 'auto' uses page identifiers when the configuration lists them",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip certificate validation",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--host",
        default=SERVICE_HOST,
        help="Viewer host serving configuration and page assets",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_download_arguments(parser: argparse.ArgumentParser) -> None:
    _add_common_arguments(parser)
    parser.add_argument(
        "--output",
        default=".",
        type=Path,
        help="Directory where the PDF should be written",
    )
    parser.add_argument(
        "--temp-download-folder",
        default=None,
        type=Path,
        help="Folder for downloaded page images (defaults to the book title)",
    )
    parser.add_argument(
        "--keep-images",
        action="store_true",
        help="Keep the downloaded page images after the PDF is written",
    )
    parser.add_argument(
        "--ocr",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Make the PDF searchable with tesseract",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Download AnyFlip flipbooks as (optionally searchable) PDF documents.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    download_parser = subparsers.add_parser(
        "download", help="Download a flipbook and convert it to PDF"
    )
    _add_download_arguments(download_parser)

    describe_parser = subparsers.add_parser(
        "describe", help="Print the resolved title and page URLs without downloading"
    )
    _add_common_arguments(describe_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> DownloadOptions:
    return DownloadOptions(
        title=args.title,
        auto_title=args.auto_title,
        ocr=getattr(args, "ocr", False),
        output_dir=Path(getattr(args, "output", ".")).resolve(),
        temp_download_folder=getattr(args, "temp_download_folder", None),
        keep_images=getattr(args, "keep_images", False),
        insecure=args.insecure,
        timeout=args.timeout,
        service_host=args.host,
        scheme=args.scheme,
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _run_download(args: argparse.Namespace) -> None:
    options = build_options(args)
    result = run_flipbook(args.url, options)
    logger.info(
        "Finished in %.2fs: %s (%d pages, %s scheme)",
        result.total_seconds,
        result.output_path,
        result.page_count,
        result.scheme,
    )


def _run_describe(args: argparse.Namespace) -> None:
    descriptor = prepare_download(args.url, build_options(args))
    sys.stdout.write(f"{descriptor.title}\n")
    for page_url in descriptor.page_urls:
        sys.stdout.write(page_url + "\n")
    sys.stdout.flush()


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    try:
        if args.command == "describe":
            _run_describe(args)
        else:
            _run_download(args)
    except FlipbookError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
