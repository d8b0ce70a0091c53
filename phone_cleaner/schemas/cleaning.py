from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from phone_cleaner.config import settings
from phone_cleaner.models.phone import (
    CleaningSettings,
    InjectionRule,
    InvalidReason,
    LengthMode,
    RowStatus,
    TrunkHandling,
)


# ─────────────────────────────────────────────────────────────────────────────
# Requests
# ─────────────────────────────────────────────────────────────────────────────

class InjectionRulePayload(BaseModel):
    id: str
    name: Optional[str] = None
    dial_code: str
    length_mode: LengthMode = LengthMode.EQUALS
    length_equals: Optional[int] = Field(default=None, ge=1)
    length_min: Optional[int] = Field(default=None, ge=0)
    length_max: Optional[int] = Field(default=None, ge=0)
    prefixes: list[str] = Field(default_factory=list)
    trunk_handling: TrunkHandling = TrunkHandling.KEEP
    enabled: bool = True

    def to_rule(self) -> InjectionRule:
        return InjectionRule(
            id=self.id,
            name=self.name,
            dial_code=self.dial_code,
            length_mode=self.length_mode,
            length_equals=self.length_equals,
            length_min=self.length_min,
            length_max=self.length_max,
            prefixes=tuple(self.prefixes),
            trunk_handling=self.trunk_handling,
            enabled=self.enabled,
        )


class CleaningSettingsPayload(BaseModel):
    default_country_iso2: str = Field(default_factory=lambda: settings.DEFAULT_COUNTRY_ISO2)
    strict_mode: bool = False
    allow_missing_trunk_prefix: bool = True
    strip_extra_leading_zeros: bool = False
    detect_name_duplicates: bool = False
    preset_id: Optional[str] = None
    use_conditional_injection: bool = False
    ignore_unmatched: bool = True
    fallback_to_default: bool = False
    injection_rules: list[InjectionRulePayload] = Field(default_factory=list)   # order matters

    def to_settings(self) -> CleaningSettings:
        return CleaningSettings(
            default_country_iso2=self.default_country_iso2,
            strict_mode=self.strict_mode,
            allow_missing_trunk_prefix=self.allow_missing_trunk_prefix,
            strip_extra_leading_zeros=self.strip_extra_leading_zeros,
            detect_name_duplicates=self.detect_name_duplicates,
            preset_id=self.preset_id,
            use_conditional_injection=self.use_conditional_injection,
            ignore_unmatched=self.ignore_unmatched,
            fallback_to_default=self.fallback_to_default,
            injection_rules=tuple(rule.to_rule() for rule in self.injection_rules),
        )


class CleanTextRequest(BaseModel):
    text: str
    settings: CleaningSettingsPayload = Field(default_factory=CleaningSettingsPayload)


# ─────────────────────────────────────────────────────────────────────────────
# Responses
# ─────────────────────────────────────────────────────────────────────────────

class CountryResponse(BaseModel):
    iso2: str
    name_en: str
    name_ar: str
    dial_code: str
    trunk_prefix: Optional[str] = None
    national_number_length_min: Optional[int] = None
    national_number_length_max: Optional[int] = None

    model_config = {"from_attributes": True}


class PresetResponse(BaseModel):
    id: str
    label_en: str
    label_ar: str
    description_ar: str
    default_country_iso2: str
    country_overrides: dict[str, Any]

    model_config = {"from_attributes": True}


class NormalizedRowResponse(BaseModel):
    index: int
    raw: str
    name: str
    phone_raw: str
    status: RowStatus
    reason: Optional[InvalidReason] = None
    normalized: Optional[str] = None
    national_number: Optional[str] = None
    country: Optional[CountryResponse] = None
    name_normalized: Optional[str] = None
    is_kept: Optional[bool] = None
    matched_rule_id: Optional[str] = None
    matched_rule_name: Optional[str] = None
    matched_rule_dial_code: Optional[str] = None

    model_config = {"from_attributes": True}


class DuplicateGroupResponse(BaseModel):
    id: str
    key: str
    canonical_phone: Optional[str] = None
    items: list[NormalizedRowResponse]
    kept_index: int

    model_config = {"from_attributes": True}


class CleaningStatsResponse(BaseModel):
    total: int
    valid: int
    unique: int
    duplicate: int
    invalid: int

    model_config = {"from_attributes": True}


class InputHintsResponse(BaseModel):
    csv_like: bool
    separator_like: bool

    model_config = {"from_attributes": True}


class AuditLogEntry(BaseModel):
    row_index: int
    action: str
    reason: str
    original_value: Optional[str] = None
    new_value: Optional[str] = None
    formula_id: Optional[str] = None

    model_config = {"from_attributes": True}


class CleaningReportResponse(BaseModel):
    rows: list[NormalizedRowResponse]
    unique: list[NormalizedRowResponse]
    duplicates: list[NormalizedRowResponse]
    invalid: list[NormalizedRowResponse]
    duplicate_groups_by_phone: list[DuplicateGroupResponse]
    duplicate_groups_by_name_phone: list[DuplicateGroupResponse]
    duplicate_groups_by_name: list[DuplicateGroupResponse]
    stats: CleaningStatsResponse
    hints: InputHintsResponse
    created_at: float
    duration_ms: float
    audit_log: list[AuditLogEntry]

    model_config = {"from_attributes": True}


class JobCreatedResponse(BaseModel):
    job_id: str
    status: str


class JobStatusResponse(BaseModel):
    job_id: str
    status: str
    progress: Optional[int] = None
    processed: Optional[int] = None
    total: Optional[int] = None
    report: Optional[CleaningReportResponse] = None
    error_message: Optional[str] = None
