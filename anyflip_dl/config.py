"""Configuration objects and constants for flipbook downloads."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

SERVICE_HOST = "online.anyflip.com"
CONFIG_JS_PATH = ("mobile", "javascript", "config.js")
NUMERIC_PAGE_DIR = ("files", "mobile")
IDENTIFIER_PAGE_DIR = ("files", "large")

# Length of the "var htmlConfig = " declaration that wraps the JSON payload.
CONFIG_PREFIX_LENGTH = 17
CONFIG_SUFFIX_LENGTH = 1

DEFAULT_TIMEOUT = 30.0
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
)

SCHEME_AUTO = "auto"
SCHEME_NUMERIC = "numeric"
SCHEME_IDENTIFIER = "identifier"
SCHEME_CHOICES = (SCHEME_AUTO, SCHEME_NUMERIC, SCHEME_IDENTIFIER)


@dataclass(frozen=True)
class DownloadOptions:
    """Settings for a single flipbook run, fixed once the CLI has parsed its arguments."""

    title: Optional[str] = None
    auto_title: bool = True
    ocr: bool = True
    output_dir: Path = Path(".")
    temp_download_folder: Optional[Path] = None
    keep_images: bool = False
    insecure: bool = False
    timeout: float = DEFAULT_TIMEOUT
    service_host: str = SERVICE_HOST
    scheme: str = SCHEME_AUTO
