"""Exception hierarchy for flipbook retrieval."""

from __future__ import annotations


class FlipbookError(RuntimeError):
    """Base class for every error that aborts a flipbook run."""


class InvalidURLError(FlipbookError, ValueError):
    """Raised when a URL does not name a collection and a document."""


class TransportError(FlipbookError):
    """Raised when a request cannot complete (DNS, connection, TLS, timeout)."""


class RemoteError(FlipbookError):
    """Raised when the service answers with a non-success status."""

    def __init__(self, message: str, url: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class ParseError(FlipbookError):
    """Raised when the configuration text is in no recognised format."""


class AssemblyError(FlipbookError):
    """Raised when downloaded pages cannot be turned into a PDF."""
