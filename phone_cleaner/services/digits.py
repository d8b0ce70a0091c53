"""Digit folding and small string helpers shared by the phone pipeline."""

import re

# Eastern Arabic (U+0660..U+0669) and Extended Arabic-Indic / Persian (U+06F0..U+06F9)
_DIGIT_TABLE = str.maketrans(
    "٠١٢٣٤٥٦٧٨٩۰۱۲۳۴۵۶۷۸۹",
    "01234567890123456789",
)

_NON_DIGIT = re.compile(r"[^0-9]")
_WHITESPACE = re.compile(r"\s+")


def to_western_digits(value: str) -> str:
    """Map Arabic and Persian digit glyphs to ASCII 0-9; everything else is untouched."""
    if not value:
        return ""
    return value.translate(_DIGIT_TABLE)


def extract_digits(value: str) -> str:
    """Fold digits, then drop every character that is not 0-9."""
    return _NON_DIGIT.sub("", to_western_digits(value))


def collapse_spaces(value: str) -> str:
    return _WHITESPACE.sub(" ", value or "").strip()


def normalize_name(value: str) -> str:
    """Space-collapsed, case-folded name used as a grouping key."""
    return collapse_spaces(value).casefold()
