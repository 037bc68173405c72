"""Tolerant extraction of flipbook metadata from ``config.js`` text.

The viewer has shipped several encodings of the same configuration over time:

* legacy assignments such as ``bookConfig.bookTitle="..."`` and
  ``bookConfig.totalPageCount=12``,
* property-style objects such as ``"meta":{"title":"..."}`` and
  ``"totalPageCount":"12"``,
* a ``var htmlConfig = {...};`` document carrying a ``fliphtml5_pages`` list.

Each field is read by an ordered list of extractors. An extractor returns
``None`` when its pattern is absent and the first non-``None`` result wins.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple

from .config import CONFIG_PREFIX_LENGTH, CONFIG_SUFFIX_LENGTH
from .errors import ParseError
from .models import FlipbookMetadata

logger = logging.getLogger("anyflip_dl.parser")

Extractor = Callable[[str], Optional[str]]

_QUOTED = r'"((?:[^"\\]|\\.)*)"'

LEGACY_TITLE_PATTERN = re.compile(r"(?:bookConfig\.)?bookTitle\s*=\s*" + _QUOTED)
META_TITLE_PATTERN = re.compile(r'"meta"\s*:\s*\{\s*"title"\s*:\s*' + _QUOTED)

PAGE_COUNT_PATTERN = re.compile(
    r'(?:bookConfig\.)?totalPageCount"?\s*(?P<sep>[=:])\s*(?P<value>"?\d+"?)'
)
ASCII_DIGITS = re.compile(r"[0-9]+")
MAX_INT_DIGITS = 6


def _legacy_title(raw: str) -> Optional[str]:
    match = LEGACY_TITLE_PATTERN.search(raw)
    return match.group(1) if match else None


def _meta_title(raw: str) -> Optional[str]:
    match = META_TITLE_PATTERN.search(raw)
    return match.group(1) if match else None


def _page_count_with(separator: str) -> Extractor:
    def extract(raw: str) -> Optional[str]:
        for match in PAGE_COUNT_PATTERN.finditer(raw):
            if match.group("sep") == separator:
                return match.group(0).split(separator, 1)[1].strip().strip('"')
        return None

    extract.__name__ = f"page_count_{'assignment' if separator == '=' else 'property'}"
    return extract


TITLE_EXTRACTORS: Sequence[Extractor] = (_legacy_title, _meta_title)
PAGE_COUNT_EXTRACTORS: Sequence[Extractor] = (_page_count_with("="), _page_count_with(":"))


def first_match(raw: str, extractors: Sequence[Extractor]) -> Optional[str]:
    """Run extractors in order and return the first value found."""
    for extractor in extractors:
        value = extractor(raw)
        if value is not None:
            logger.debug("Extractor %s matched %r", extractor.__name__, value)
            return value
    return None


def parse_int(value: str) -> int:
    """Convert a run of ASCII digits to an integer, rejecting anything else."""
    if not ASCII_DIGITS.fullmatch(value):
        raise ParseError(f"Expected ASCII digits, got {value!r}")
    if len(value.lstrip("0")) > MAX_INT_DIGITS:
        raise ParseError(f"Number too large: {value[:20]}... ({len(value)} digits)")
    try:
        return int(value)
    except ValueError as exc:
        raise ParseError(f"Cannot convert {value[:20]!r} to an integer") from exc


def extract_title(raw: str) -> Optional[str]:
    """Return the title exactly as it appears between the quotes."""
    return first_match(raw, TITLE_EXTRACTORS)


def extract_page_count(raw: str) -> int:
    value = first_match(raw, PAGE_COUNT_EXTRACTORS)
    if value is None:
        raise ParseError("page count not found")
    count = parse_int(value)
    if count <= 0:
        raise ParseError(f"page count must be positive, got {count}")
    return count


def extract_page_identifiers(raw: str) -> Tuple[str, ...]:
    """Read the ``fliphtml5_pages`` identifier list used by some uploads.

    The payload is wrapped in a fixed ``var htmlConfig = `` prefix and a
    trailing ``;``. Exactly that much is trimmed before the JSON parse.
    """
    if len(raw) <= CONFIG_PREFIX_LENGTH + CONFIG_SUFFIX_LENGTH:
        raise ParseError("configuration too short for the fliphtml5 format")
    payload = raw[CONFIG_PREFIX_LENGTH : len(raw) - CONFIG_SUFFIX_LENGTH]
    try:
        document = json.loads(payload)
    except ValueError as exc:
        raise ParseError(f"configuration is not a JSON document: {exc}") from exc

    if not isinstance(document, dict):
        raise ParseError("configuration document is not an object")
    pages = document.get("fliphtml5_pages")
    if not isinstance(pages, list):
        raise ParseError("fliphtml5_pages missing or not a list")

    identifiers: List[str] = []
    for index, page in enumerate(pages):
        if not isinstance(page, dict):
            raise ParseError(f"fliphtml5_pages[{index}] is not an object")
        names = page.get("n")
        if not isinstance(names, list) or not names:
            raise ParseError(f"fliphtml5_pages[{index}].n is not a non-empty list")
        if not isinstance(names[0], str):
            raise ParseError(f"fliphtml5_pages[{index}].n[0] is not a string")
        identifiers.append(names[0])
    return tuple(identifiers)


def parse(raw: str) -> FlipbookMetadata:
    """Extract title, page count and page identifiers from ``config.js`` text."""
    page_count = extract_page_count(raw)
    title = extract_title(raw)
    try:
        identifiers = extract_page_identifiers(raw)
    except ParseError as exc:
        logger.debug("Page identifier list unavailable: %s", exc)
        identifiers = ()
    logger.debug(
        "Parsed config: title=%r pages=%d identifiers=%d",
        title,
        page_count,
        len(identifiers),
    )
    return FlipbookMetadata(title=title, page_count=page_count, page_identifiers=identifiers)
