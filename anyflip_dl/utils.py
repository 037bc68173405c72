"""Utility helpers for string normalization and path handling."""

from __future__ import annotations

import re

UNSAFE_FILENAME_PATTERN = re.compile(r"[\\/:*?\"<>|'\x00-\x1f]+")
WHITESPACE_PATTERN = re.compile(r"\s+")


def safe_filename(value: str, fallback: str = "flipbook") -> str:
    """Strip path-hostile characters from a title while keeping it readable."""
    cleaned = UNSAFE_FILENAME_PATTERN.sub("", value or "")
    cleaned = WHITESPACE_PATTERN.sub(" ", cleaned).strip().strip(".")
    return cleaned[:200] or fallback
