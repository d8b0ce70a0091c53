"""
Conditional dial-code injection for bare local numbers.

Rules are tried strictly in list order and the first one that matches
wins, even when a later rule would be "more specific".  Reordering the
list changes results.
"""

from typing import Sequence, Union

from phone_cleaner.models.phone import (
    InjectionMatch,
    InjectionRule,
    InjectionUnmatched,
    LengthMode,
    TrunkHandling,
)
from phone_cleaner.services.digits import extract_digits

InjectionResult = Union[InjectionMatch, InjectionUnmatched]


def rule_dial_digits(rule: InjectionRule) -> str:
    """Dial code digits, or "" when the rule carries no usable dial code."""
    digits = extract_digits(rule.dial_code or "")
    # country calling codes never start with 0
    return "" if digits.startswith("0") else digits


def matches_length(rule: InjectionRule, length: int) -> bool:
    if rule.length_mode == LengthMode.EQUALS:
        if rule.length_equals is None:
            return False
        return length == rule.length_equals

    # A range with neither bound would match everything
    if rule.length_min is None and rule.length_max is None:
        return False

    low = rule.length_min if rule.length_min is not None else 0
    if length < low:
        return False
    return rule.length_max is None or length <= rule.length_max


def matches_prefixes(rule: InjectionRule, digits: str) -> bool:
    if not rule.prefixes:
        return True
    for prefix in rule.prefixes:
        folded = extract_digits(prefix)
        if folded and digits.startswith(folded):
            return True
    return False


def apply_trunk_handling(rule: InjectionRule, digits: str) -> str:
    if rule.trunk_handling == TrunkHandling.REMOVE_LEADING_0 and digits.startswith("0"):
        return digits[1:]
    return digits


def apply_conditional_injection(local_digits: str, rules: Sequence[InjectionRule]) -> InjectionResult:
    """Return the first matching rule's E.164 result, or InjectionUnmatched."""
    for rule in rules:
        if not rule.enabled:
            continue

        dial_digits = rule_dial_digits(rule)
        if not dial_digits:
            continue
        if not matches_length(rule, len(local_digits)):
            continue
        if not matches_prefixes(rule, local_digits):
            continue

        national_number = apply_trunk_handling(rule, local_digits)
        if not national_number:
            continue

        return InjectionMatch(
            rule_id=rule.id,
            rule_name=rule.name,
            dial_code_digits=dial_digits,
            national_number=national_number,
            normalized_e164=f"+{dial_digits}{national_number}",
        )

    return InjectionUnmatched()
