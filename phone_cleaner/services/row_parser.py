"""
Row parser — splits one raw input line into a name part and a phone part.

No delimiter is guaranteed, so parsing is an ordered chain of
(predicate, extractor) strategies.  The first extractor that returns a
result wins; an extractor may decline (return None) even when its
predicate fired, and the chain moves on.

  1. separator split    |  ,  ;   (also forced on by csv/separator hints)
  2. spaced dash split  " - ", " – ", " — "
  3. phone-pattern scan
  4. any digit          whole line is the phone
  5. no digit           whole line is the name

Digit counting always runs on the digit-folded line; the returned name and
phone keep the original glyphs.  Folding maps one character to one
character, so offsets found on the folded line are valid on the raw one.
"""

import re
from typing import Callable, List, Optional, Sequence, Tuple

from phone_cleaner.models.phone import InputHints, ParsedRow
from phone_cleaner.services.digits import collapse_spaces, extract_digits, to_western_digits

SEPARATOR_PATTERN = re.compile(r"[|,;]+")
DASH_SEPARATOR_PATTERN = re.compile(r"\s[-–—]\s")
PHONE_LIKE_PATTERN = re.compile(r"(?:\+|00)?[0-9][0-9\s()./_-]{4,}[0-9]")
NAME_EDGE_PATTERN = re.compile(r"^[\s,;:|\-–—]+|[\s,;:|\-–—]+$")

Split = Tuple[str, str]  # (name, phone_raw)
Predicate = Callable[[str, InputHints], bool]
Extractor = Callable[[str, str], Optional[Split]]


# ============================================================================
# HELPERS
# ============================================================================

def pick_phone_index(parts: Sequence[str]) -> int:
    """Index of the part with the most digits; the first one wins ties."""
    best_index = 0
    best_score = 0
    for index, part in enumerate(parts):
        score = len(extract_digits(part))
        if score > best_score:
            best_score = score
            best_index = index
    return best_index


def _split_by_digit_density(raw: str, folded: str, pattern) -> Optional[Split]:
    raw_parts = [collapse_spaces(p) for p in pattern.split(raw)]
    folded_parts = [collapse_spaces(p) for p in pattern.split(folded)]
    pairs = [(r, f) for r, f in zip(raw_parts, folded_parts) if f]
    if len(pairs) < 2:
        return None

    phone_index = pick_phone_index([f for _, f in pairs])
    phone_raw = pairs[phone_index][0]
    name = collapse_spaces(" ".join(r for i, (r, _) in enumerate(pairs) if i != phone_index))
    return name, phone_raw


# ============================================================================
# STRATEGIES
# ============================================================================

def _wants_separator_split(folded: str, hints: InputHints) -> bool:
    return hints.separator_like or hints.csv_like or bool(SEPARATOR_PATTERN.search(folded))


def _split_on_separators(raw: str, folded: str) -> Optional[Split]:
    return _split_by_digit_density(raw, folded, SEPARATOR_PATTERN)


def _has_spaced_dash(folded: str, hints: InputHints) -> bool:
    return bool(DASH_SEPARATOR_PATTERN.search(folded))


def _split_on_dash(raw: str, folded: str) -> Optional[Split]:
    return _split_by_digit_density(raw, folded, DASH_SEPARATOR_PATTERN)


def _has_phone_pattern(folded: str, hints: InputHints) -> bool:
    return bool(PHONE_LIKE_PATTERN.search(folded))


def _extract_phone_pattern(raw: str, folded: str) -> Optional[Split]:
    best = None
    best_digits = -1
    for match in PHONE_LIKE_PATTERN.finditer(folded):
        digits = len(extract_digits(match.group()))
        if digits > best_digits:
            best = match
            best_digits = digits
    if best is None:
        return None

    start, end = best.span()
    phone_raw = raw[start:end].strip()
    rest = collapse_spaces(raw[:start] + " " + raw[end:])
    name = collapse_spaces(NAME_EDGE_PATTERN.sub("", rest))
    return name, phone_raw


def _has_any_digit(folded: str, hints: InputHints) -> bool:
    return bool(extract_digits(folded))


def _whole_line_as_phone(raw: str, folded: str) -> Optional[Split]:
    return "", raw


def _always(folded: str, hints: InputHints) -> bool:
    return True


def _whole_line_as_name(raw: str, folded: str) -> Optional[Split]:
    return collapse_spaces(raw), ""


STRATEGIES: List[Tuple[str, Predicate, Extractor]] = [
    ("separator", _wants_separator_split, _split_on_separators),
    ("dash", _has_spaced_dash, _split_on_dash),
    ("phone_pattern", _has_phone_pattern, _extract_phone_pattern),
    ("digits_only", _has_any_digit, _whole_line_as_phone),
    ("name_only", _always, _whole_line_as_name),
]


# ============================================================================
# ENTRY POINT
# ============================================================================

def parse_row(line: Optional[str], index: int, hints: Optional[InputHints] = None) -> ParsedRow:
    raw = line or ""
    trimmed = raw.strip()
    if not trimmed:
        return ParsedRow(index=index, raw=raw, name="", phone_raw="")

    hints = hints or InputHints()
    folded = to_western_digits(trimmed)

    for _name, predicate, extractor in STRATEGIES:
        if not predicate(folded, hints):
            continue
        result = extractor(trimmed, folded)
        if result is not None:
            name, phone_raw = result
            return ParsedRow(index=index, raw=raw, name=name, phone_raw=phone_raw)

    # name_only always succeeds; kept for type checkers
    return ParsedRow(index=index, raw=raw, name=collapse_spaces(trimmed), phone_raw="")
