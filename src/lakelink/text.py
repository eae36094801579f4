"""Text-scanning primitives shared by the field normaliser and locality parser.

Every primitive returns ``None`` on a miss rather than raising, so callers
can treat an unparseable value as a missing one.
"""

from __future__ import annotations

import re
from typing import Any

import pandas as pd
from unidecode import unidecode

_STRIP_CHARS = re.compile(r"['()]")
_DIGIT_RUN = re.compile(r"\d+")


def _anchor_group(anchors: tuple[str, ...]) -> str:
    if not anchors:
        raise ValueError("at least one anchor is required")
    return "(?:" + "|".join(re.escape(a) for a in anchors) + ")"


def token_before(text: str | None, *anchors: str) -> str | None:
    """Return the word immediately preceding the first whole-word anchor.

    >>> token_before("BANKERS LAKE, HILLSDALE CO.", "LAKE", "POND")
    'BANKERS'
    """
    if not text:
        return None
    pattern = re.compile(r"\b(\w+)\s+" + _anchor_group(anchors) + r"\b")
    match = pattern.search(text)
    return match.group(1) if match else None


def token_after(text: str | None, *anchors: str) -> str | None:
    """Return the single word immediately following the first whole-word anchor.

    >>> token_after("LAKE ST CLAIR", "LAKE", "POND")
    'ST'
    """
    if not text:
        return None
    pattern = re.compile(r"\b" + _anchor_group(anchors) + r"\s+(\w+)")
    match = pattern.search(text)
    return match.group(1) if match else None


def digits_in(text: str | None) -> str | None:
    """Return the first run of ASCII digits in *text*."""
    if not text:
        return None
    match = _DIGIT_RUN.search(text)
    return match.group(0) if match else None


def integer_after(text: str | None, marker: str) -> int | None:
    """Return the integer written directly after the first *marker* in *text*.

    The marker is matched literally and case-sensitively; the digits must
    follow it with nothing in between.
    """
    if not text:
        return None
    match = re.search(re.escape(marker) + r"(\d+)", text)
    return int(match.group(1)) if match else None


def is_missing(value: Any) -> bool:
    """True for ``None``, NaN, ``pd.NA`` and blank strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return bool(pd.isna(value))


def normalize_key(value: Any) -> str | None:
    """Normalise a county or lake name for exact join comparison.

    Steps:
      1. Transliterate Unicode to ASCII (e.g. typographic apostrophes).
      2. Uppercase.
      3. Remove apostrophes and parentheses.
      4. Strip leading/trailing whitespace.

    Returns ``None`` for missing or blank values.
    """
    if is_missing(value):
        return None
    text = unidecode(str(value)).upper()
    text = _STRIP_CHARS.sub("", text).strip()
    return text or None
