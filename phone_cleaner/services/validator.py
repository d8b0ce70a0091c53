"""Length and strict-mode checks applied after normalization."""

from phone_cleaner.models.phone import InvalidReason, NormalizationFailure, NormalizationSuccess
from phone_cleaner.services.countries import GENERIC_MAX_LENGTH, GENERIC_MIN_LENGTH
from phone_cleaner.services.normalizer import NormalizationResult


def validate_length(result: NormalizationSuccess, strict_mode: bool) -> NormalizationResult:
    """
    Check the national number against the country's bounds.

    Outside a country bound, lenient mode still accepts the number when the
    total E.164 digit count stays inside the generic 7..15 range on that
    side.  A side the country leaves open falls back to the generic check
    on the total digit count.
    """
    total_digits = len(result.normalized.lstrip("+"))
    national_length = len(result.national_number)

    country = result.country
    low = country.national_number_length_min if country else None
    high = country.national_number_length_max if country else None

    if low and national_length < low:
        if not strict_mode and total_digits >= GENERIC_MIN_LENGTH:
            return result
        return NormalizationFailure(InvalidReason.TOO_SHORT)

    if high and national_length > high:
        if not strict_mode and total_digits <= GENERIC_MAX_LENGTH:
            return result
        return NormalizationFailure(InvalidReason.TOO_LONG)

    if not low and total_digits < GENERIC_MIN_LENGTH:
        return NormalizationFailure(InvalidReason.TOO_SHORT)

    if not high and total_digits > GENERIC_MAX_LENGTH:
        return NormalizationFailure(InvalidReason.TOO_LONG)

    return result


def validate_normalized(result: NormalizationResult, strict_mode: bool) -> NormalizationResult:
    if not result.ok:
        return result

    # TODO: split "country must be known" into its own toggle instead of riding on strict_mode
    if strict_mode and result.country is None:
        return NormalizationFailure(InvalidReason.AMBIGUOUS)

    return validate_length(result, strict_mode)
