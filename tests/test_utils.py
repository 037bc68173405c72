"""Tests for file name sanitizing."""

import pytest

from anyflip_dl.utils import safe_filename


@pytest.mark.parametrize(
    "value,expected",
    [
        ("Sample Book", "Sample Book"),
        ("My: Book?", "My Book"),
        ("a/b\\c", "abc"),
        ("It's \"quoted\" <x>|*", "Its quoted x"),
        ("  spaced   out  ", "spaced out"),
        (" Padded Title ", "Padded Title"),
        (r"C:\new\table", "Cnewtable"),
    ],
)
def test_safe_filename(value, expected):
    """Test path-hostile characters and surrounding whitespace are removed."""
    assert safe_filename(value) == expected


@pytest.mark.parametrize("value", ["???", ""])
def test_safe_filename_fallback(value):
    """Test titles that sanitize to nothing use the fallback."""
    assert safe_filename(value, fallback="1234") == "1234"
