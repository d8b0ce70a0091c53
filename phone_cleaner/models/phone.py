"""
Domain records for the phone cleaning pipeline.

Every record here is an immutable value.  Passes that "change" a row
(deduplication, name normalisation) build a new record with
dataclasses.replace instead of writing into a shared one.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# ============================================================================
# ENUMS
# ============================================================================

class InvalidReason(str, Enum):
    """Why a row was rejected."""
    EMPTY = "empty"
    NO_DIGITS = "no_digits"
    NO_RULE_MATCH = "no_rule_match"
    INVALID_PREFIX = "invalid_prefix"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    AMBIGUOUS = "ambiguous"


class RowStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    DUPLICATE = "duplicate"


class LengthMode(str, Enum):
    EQUALS = "equals"
    RANGE = "range"


class TrunkHandling(str, Enum):
    KEEP = "keep"
    REMOVE_LEADING_0 = "removeLeading0"


# ============================================================================
# REFERENCE DATA
# ============================================================================

@dataclass(frozen=True)
class Country:
    """One entry of the country table."""
    iso2: str
    name_en: str
    name_ar: str
    dial_code: str
    trunk_prefix: Optional[str] = None
    national_number_length_min: Optional[int] = None
    national_number_length_max: Optional[int] = None

    def merged(self, override: Optional[Dict[str, Any]]) -> "Country":
        """Return a copy with the override's known fields applied."""
        if not override:
            return self
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in override.items() if k in known})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Country":
        return cls(
            iso2=str(data["iso2"]).upper(),
            name_en=data.get("name_en", ""),
            name_ar=data.get("name_ar", ""),
            dial_code=str(data["dial_code"]),
            trunk_prefix=data.get("trunk_prefix") or None,
            national_number_length_min=data.get("national_number_length_min"),
            national_number_length_max=data.get("national_number_length_max"),
        )


@dataclass(frozen=True)
class Preset:
    id: str
    label_en: str
    label_ar: str
    description_ar: str
    default_country_iso2: str
    country_overrides: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InjectionRule:
    """
    Assigns a dial code to a bare local number.

    Rules live in an ordered sequence; the first one that matches wins.
    """
    id: str
    dial_code: str
    name: Optional[str] = None
    length_mode: LengthMode = LengthMode.EQUALS
    length_equals: Optional[int] = None
    length_min: Optional[int] = None
    length_max: Optional[int] = None
    prefixes: Tuple[str, ...] = ()
    trunk_handling: TrunkHandling = TrunkHandling.KEEP
    enabled: bool = True


# ============================================================================
# SETTINGS
# ============================================================================

@dataclass(frozen=True)
class CleaningSettings:
    default_country_iso2: str = "SA"
    strict_mode: bool = False
    allow_missing_trunk_prefix: bool = True
    strip_extra_leading_zeros: bool = False
    detect_name_duplicates: bool = False
    preset_id: Optional[str] = None
    use_conditional_injection: bool = False
    ignore_unmatched: bool = True
    fallback_to_default: bool = False
    injection_rules: Tuple[InjectionRule, ...] = ()


@dataclass(frozen=True)
class NormalizationContext:
    """Everything the normalizer needs, resolved once per run."""
    countries: Tuple[Country, ...]
    default_country: Optional[Country]
    default_country_iso2: str
    strict_mode: bool = False
    allow_missing_trunk_prefix: bool = True
    strip_extra_leading_zeros: bool = False
    use_conditional_injection: bool = False
    ignore_unmatched: bool = True
    fallback_to_default: bool = False
    injection_rules: Tuple[InjectionRule, ...] = ()


@dataclass(frozen=True)
class InputHints:
    csv_like: bool = False
    separator_like: bool = False


# ============================================================================
# OUTCOMES
# ============================================================================

@dataclass(frozen=True)
class NormalizationSuccess:
    normalized: str
    national_number: str
    is_international: bool
    country: Optional[Country] = None
    matched_rule_id: Optional[str] = None
    matched_rule_name: Optional[str] = None
    matched_rule_dial_code: Optional[str] = None

    ok = True


@dataclass(frozen=True)
class NormalizationFailure:
    reason: InvalidReason

    ok = False


@dataclass(frozen=True)
class InjectionMatch:
    rule_id: str
    dial_code_digits: str
    national_number: str
    normalized_e164: str
    rule_name: Optional[str] = None

    matched = True


@dataclass(frozen=True)
class InjectionUnmatched:
    matched = False


# ============================================================================
# ROWS & REPORT
# ============================================================================

@dataclass(frozen=True)
class ParsedRow:
    index: int
    raw: str
    name: str
    phone_raw: str


@dataclass(frozen=True)
class NormalizedRow:
    index: int
    raw: str
    name: str
    phone_raw: str
    status: RowStatus
    reason: Optional[InvalidReason] = None
    normalized: Optional[str] = None
    national_number: Optional[str] = None
    country: Optional[Country] = None
    name_normalized: Optional[str] = None
    is_kept: Optional[bool] = None
    matched_rule_id: Optional[str] = None
    matched_rule_name: Optional[str] = None
    matched_rule_dial_code: Optional[str] = None

    @classmethod
    def from_parsed(cls, parsed: ParsedRow, **kwargs) -> "NormalizedRow":
        return cls(
            index=parsed.index,
            raw=parsed.raw,
            name=parsed.name,
            phone_raw=parsed.phone_raw,
            **kwargs,
        )


@dataclass(frozen=True)
class DuplicateGroup:
    id: str
    key: str
    items: Tuple[NormalizedRow, ...]
    kept_index: int
    canonical_phone: Optional[str] = None


@dataclass(frozen=True)
class CleaningStats:
    total: int = 0
    valid: int = 0
    unique: int = 0
    duplicate: int = 0
    invalid: int = 0


@dataclass(frozen=True)
class CleaningLogEntry:
    """One traceable decision taken while cleaning a row."""
    row_index: int
    action: str
    reason: str
    original_value: Optional[str] = None
    new_value: Optional[str] = None
    formula_id: Optional[str] = None


@dataclass(frozen=True)
class CleaningReport:
    rows: List[NormalizedRow]
    unique: List[NormalizedRow]
    duplicates: List[NormalizedRow]
    invalid: List[NormalizedRow]
    duplicate_groups_by_phone: List[DuplicateGroup]
    duplicate_groups_by_name_phone: List[DuplicateGroup]
    duplicate_groups_by_name: List[DuplicateGroup]
    stats: CleaningStats
    hints: InputHints
    created_at: float
    duration_ms: float
    audit_log: List[CleaningLogEntry] = field(default_factory=list)


@dataclass(frozen=True)
class CleaningRun:
    """Outcome of a whole batch: a report, or one explicit error."""
    ok: bool
    report: Optional[CleaningReport] = None
    error: Optional[str] = None
