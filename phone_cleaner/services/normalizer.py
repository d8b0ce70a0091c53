"""
Phone normalizer — turns a raw phone token into an E.164 string.

Routing:
  "00..."  → international (00 becomes +)
  "+..."   → international
  other    → local: injection rules first (when enabled), then the
             default country

Every failure is returned as a NormalizationFailure value carrying an
InvalidReason; nothing here raises for bad input.
"""

import re
from typing import Union

from phone_cleaner.models.phone import (
    InvalidReason,
    NormalizationContext,
    NormalizationFailure,
    NormalizationSuccess,
)
from phone_cleaner.services.countries import lookup_by_dial_code
from phone_cleaner.services.digits import extract_digits, to_western_digits
from phone_cleaner.services.injection import apply_conditional_injection

NormalizationResult = Union[NormalizationSuccess, NormalizationFailure]

_NOT_DIGIT_OR_PLUS = re.compile(r"[^0-9+]")


def sanitize_raw(value: str) -> str:
    """Keep digits and a single leading + (only if the token started with one)."""
    kept = _NOT_DIGIT_OR_PLUS.sub("", to_western_digits(value or ""))
    has_plus = kept.startswith("+")
    digits = kept.replace("+", "")
    return f"+{digits}" if has_plus else digits


def normalize_phone(raw_phone: str, context: NormalizationContext) -> NormalizationResult:
    sanitized = sanitize_raw(raw_phone)
    if not sanitized:
        return NormalizationFailure(InvalidReason.NO_DIGITS)

    if sanitized.startswith("00"):
        digits = sanitized[2:]
        if not digits:
            return NormalizationFailure(InvalidReason.NO_DIGITS)
        return normalize_international(f"+{digits}", context)

    if sanitized.startswith("+"):
        return normalize_international(sanitized, context)

    if context.use_conditional_injection:
        return _normalize_with_injection(sanitized, context)

    return normalize_local(sanitized, context)


def normalize_international(value: str, context: NormalizationContext) -> NormalizationResult:
    digits = value.lstrip("+")
    if not digits:
        return NormalizationFailure(InvalidReason.NO_DIGITS)
    # "+0..." cannot be a country calling code
    if digits.startswith("0"):
        return NormalizationFailure(InvalidReason.INVALID_PREFIX)

    country = lookup_by_dial_code(context.countries, digits)
    national_number = digits[len(country.dial_code):] if country else digits
    if not national_number:
        return NormalizationFailure(InvalidReason.INVALID_PREFIX)

    return NormalizationSuccess(
        normalized=f"+{digits}",
        national_number=national_number,
        country=country,
        is_international=True,
    )


def normalize_local(value: str, context: NormalizationContext) -> NormalizationResult:
    """Resolve a bare local number against the configured default country."""
    country = context.default_country
    if country is None:
        return NormalizationFailure(InvalidReason.AMBIGUOUS)

    digits = extract_digits(value)
    if not digits:
        return NormalizationFailure(InvalidReason.NO_DIGITS)

    trunk = country.trunk_prefix
    if trunk:
        if digits.startswith(trunk):
            digits = digits[len(trunk):]
        elif not context.allow_missing_trunk_prefix:
            return NormalizationFailure(InvalidReason.INVALID_PREFIX)

    if context.strip_extra_leading_zeros:
        digits = digits.lstrip("0")

    if not digits:
        return NormalizationFailure(InvalidReason.INVALID_PREFIX)

    return NormalizationSuccess(
        normalized=f"+{country.dial_code}{digits}",
        national_number=digits,
        country=country,
        is_international=False,
    )


def _normalize_with_injection(sanitized: str, context: NormalizationContext) -> NormalizationResult:
    local_digits = extract_digits(sanitized)
    if not local_digits:
        return NormalizationFailure(InvalidReason.NO_DIGITS)

    match = apply_conditional_injection(local_digits, context.injection_rules)
    if match.matched:
        country = lookup_by_dial_code(
            context.countries, f"{match.dial_code_digits}{match.national_number}"
        )
        return NormalizationSuccess(
            normalized=match.normalized_e164,
            national_number=match.national_number,
            country=country,
            is_international=False,
            matched_rule_id=match.rule_id,
            matched_rule_name=match.rule_name,
            matched_rule_dial_code=f"+{match.dial_code_digits}",
        )

    if context.fallback_to_default or not context.ignore_unmatched:
        return normalize_local(sanitized, context)

    return NormalizationFailure(InvalidReason.NO_RULE_MATCH)
