"""
Text normalization for product matching.

Both normalizers fold leet-speak digits back to letters, strip diacritics and
lower-case the input. ``normalize_for_matching`` keeps word boundaries for
name/token comparison, ``normalize_alphanumeric`` drops them for product code
containment checks.
"""

import re
import unicodedata
from typing import Optional

LEET_SPEAK_TABLE = str.maketrans({
    "0": "o",
    "1": "i",
    "3": "e",
    "4": "a",
    "5": "s",
    "7": "t",
    "8": "b",
})

_COMBINING_MARKS = re.compile("[\u0300-\u036f]")
_NON_WORD_CHARS = re.compile(r"[^a-z0-9\s]")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")
_WHITESPACE = re.compile(r"\s+")


def normalize_leet_speak(value: str) -> str:
    return value.translate(LEET_SPEAK_TABLE)


def _fold(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", normalize_leet_speak(value))
    return _COMBINING_MARKS.sub("", decomposed).lower()


def normalize_for_matching(value: Optional[str]) -> str:
    """Canonical, space-separated form used for name and token matching."""
    if not value:
        return ""
    spaced = _NON_WORD_CHARS.sub(" ", _fold(value))
    return _WHITESPACE.sub(" ", spaced).strip()


def normalize_alphanumeric(value: Optional[str]) -> str:
    """Canonical form without separators, used for product code lookups."""
    if not value:
        return ""
    return _NON_ALPHANUMERIC.sub("", _fold(value))
