"""Shared fixtures for flipbook tests."""

from unittest.mock import MagicMock

import pytest

from anyflip_dl.models import FlipbookReference

LEGACY_CONFIG = (
    'var bookConfig = new Object();\n'
    'bookConfig.totalPageCount="3";\n'
    'bookConfig.bookTitle="Sample Book";\n'
    'bookConfig.largePageWidth="1600";\n'
)

FLIPHTML5_CONFIG = (
    'var htmlConfig = {"meta":{"title":"Newer Upload"},'
    '"fliphtml5_pages":[{"n":["p1.jpg"]},{"n":["p2.jpg"]}],'
    '"totalPageCount":2};'
)


def make_response(status_code=200, content=b"", reason="OK", headers=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = content
    resp.reason = reason
    resp.headers = headers or {}
    return resp


@pytest.fixture
def reference():
    return FlipbookReference(host="online.anyflip.com", collection="abcd", document="1234")
