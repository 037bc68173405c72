"""Retrieval of a flipbook's ``config.js`` resource."""

from __future__ import annotations

import logging
import posixpath
from typing import Optional

import requests

from .config import CONFIG_JS_PATH, DEFAULT_TIMEOUT, SERVICE_HOST, USER_AGENT
from .errors import RemoteError, TransportError
from .models import FlipbookReference

logger = logging.getLogger("anyflip_dl.fetcher")


def build_session(insecure: bool = False) -> requests.Session:
    """Create the HTTP session shared by the config fetch and the page downloads."""
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    if insecure:
        logger.warning(
            "Certificate validation is disabled for this run. Stay safe!"
        )
        session.verify = False
    return session


def config_url(ref: FlipbookReference, host: str = SERVICE_HOST) -> str:
    return f"https://{host}{posixpath.join(ref.path, *CONFIG_JS_PATH)}"


def get(session: requests.Session, url: str, timeout: float) -> requests.Response:
    """GET a URL, mapping failures onto :class:`TransportError` and :class:`RemoteError`."""
    try:
        resp = session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise TransportError(f"Failed to fetch {url}: {exc}") from exc
    if not 200 <= resp.status_code < 300:
        raise RemoteError(
            f"Received non-2xx response from {url}: {resp.status_code} {resp.reason or ''}".rstrip(),
            url=url,
            status=resp.status_code,
        )
    return resp


class ConfigFetcher:
    """Downloads the mobile viewer configuration script for a flipbook."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        host: str = SERVICE_HOST,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.session = session or build_session()
        self.host = host
        self.timeout = timeout

    def fetch(self, ref: FlipbookReference) -> str:
        url = config_url(ref, self.host)
        logger.info("Fetching configuration %s", url)
        resp = get(self.session, url, self.timeout)
        text = resp.content.decode("utf-8", errors="replace")
        if not text.strip():
            raise RemoteError(f"Empty configuration returned by {url}", url=url, status=resp.status_code)
        logger.debug("Fetched %d bytes of configuration", len(resp.content))
        return text
