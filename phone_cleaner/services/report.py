"""
ReportBuilder — drives the phone pipeline over a block of text.

  1. split lines, sample the first lines for layout hints
  2. resolve the normalization context (settings + preset + country table)
  3. per line: parse → normalize → validate → valid / invalid
  4. deduplicate the valid rows
  5. assemble counts, groupings and the audit trail

Per-line processing depends only on the line and the shared read-only
context, so the line loop can be chunked freely by the caller.  Only
run_cleaning converts unexpected faults into an error outcome; row-level
problems are always InvalidReason values on the row.
"""

import re
import time
from typing import Callable, Iterable, List, Optional, Sequence

from loguru import logger

from phone_cleaner.models.phone import (
    CleaningLogEntry,
    CleaningReport,
    CleaningRun,
    CleaningSettings,
    CleaningStats,
    Country,
    InputHints,
    InvalidReason,
    NormalizationContext,
    NormalizedRow,
    RowStatus,
)
from phone_cleaner.services.countries import apply_override, lookup_by_iso2, sort_by_dial_code
from phone_cleaner.services.dedupe import dedupe_rows, ensure_name_normalized
from phone_cleaner.services.normalizer import normalize_phone
from phone_cleaner.services.presets import get_preset
from phone_cleaner.services.row_parser import DASH_SEPARATOR_PATTERN, parse_row
from phone_cleaner.services.validator import validate_normalized

ProgressCallback = Callable[[int, int], None]

HINT_SAMPLE_SIZE = 50
HINT_THRESHOLD = 0.4
DEFAULT_CHUNK_SIZE = 500

_LINE_BREAK = re.compile(r"\r?\n")


# ─────────────────────────────────────────────────────────────────────────────
# Input shape & context
# ─────────────────────────────────────────────────────────────────────────────

def split_lines(text: Optional[str]) -> List[str]:
    return _LINE_BREAK.split(text or "")


def analyze_input(lines: Sequence[str]) -> InputHints:
    """Mark the batch csv-like / separator-like when ≥40% of the sample shows the delimiter."""
    sample = [line.strip() for line in lines if line.strip()][:HINT_SAMPLE_SIZE]
    csv_count = 0
    separator_count = 0

    for trimmed in sample:
        if "," in trimmed:
            csv_count += 1
        if "|" in trimmed or DASH_SEPARATOR_PATTERN.search(trimmed):
            separator_count += 1

    threshold = max(1, int(len(sample) * HINT_THRESHOLD))
    return InputHints(
        csv_like=csv_count >= threshold,
        separator_like=separator_count >= threshold,
    )


def build_processing_context(countries: Iterable[Country], settings: CleaningSettings) -> NormalizationContext:
    preset = get_preset(settings.preset_id)
    if settings.preset_id and preset is None:
        logger.warning("Unknown preset '{}' ignored", settings.preset_id)

    overrides = preset.country_overrides if preset else None
    preset_iso2 = preset.default_country_iso2 if preset else None

    table = sort_by_dial_code(apply_override(countries, preset_iso2, overrides))
    default_iso2 = preset_iso2 or settings.default_country_iso2
    default_country = lookup_by_iso2(table, default_iso2, overrides)
    if default_country is None:
        logger.warning("Default country '{}' not found; local numbers will be ambiguous", default_iso2)

    return NormalizationContext(
        countries=tuple(table),
        default_country=default_country,
        default_country_iso2=default_iso2 or "",
        strict_mode=settings.strict_mode,
        allow_missing_trunk_prefix=settings.allow_missing_trunk_prefix,
        strip_extra_leading_zeros=settings.strip_extra_leading_zeros,
        use_conditional_injection=settings.use_conditional_injection,
        ignore_unmatched=settings.ignore_unmatched,
        fallback_to_default=settings.fallback_to_default,
        injection_rules=tuple(settings.injection_rules),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Per-line processing
# ─────────────────────────────────────────────────────────────────────────────

def process_line(
    line: str,
    position: int,
    context: NormalizationContext,
    hints: InputHints,
) -> NormalizedRow:
    """Classify one line; `position` is 0-based, the row index is 1-based."""
    parsed = parse_row(line, position + 1, hints)

    if not parsed.phone_raw:
        reason = InvalidReason.EMPTY if not (line or "").strip() else InvalidReason.NO_DIGITS
        return NormalizedRow.from_parsed(parsed, status=RowStatus.INVALID, reason=reason)

    normalized = normalize_phone(parsed.phone_raw, context)
    validated = validate_normalized(normalized, context.strict_mode)

    if not validated.ok:
        return NormalizedRow.from_parsed(
            parsed,
            status=RowStatus.INVALID,
            reason=validated.reason,
            matched_rule_id=normalized.matched_rule_id if normalized.ok else None,
            matched_rule_name=normalized.matched_rule_name if normalized.ok else None,
            matched_rule_dial_code=normalized.matched_rule_dial_code if normalized.ok else None,
        )

    return NormalizedRow.from_parsed(
        parsed,
        status=RowStatus.VALID,
        normalized=validated.normalized,
        national_number=validated.national_number,
        country=validated.country,
        matched_rule_id=validated.matched_rule_id,
        matched_rule_name=validated.matched_rule_name,
        matched_rule_dial_code=validated.matched_rule_dial_code,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Audit trail
# ─────────────────────────────────────────────────────────────────────────────

def build_audit_log(rows: Iterable[NormalizedRow], kept_by_phone: dict) -> List[CleaningLogEntry]:
    """One entry per decision worth explaining: rejection, rule injection, demotion."""
    entries: List[CleaningLogEntry] = []

    def _log(row, action, reason, new_value=None):
        entries.append(
            CleaningLogEntry(
                row_index=row.index,
                action=action,
                reason=reason,
                original_value=row.phone_raw or row.raw,
                new_value=new_value,
                formula_id=row.matched_rule_id,
            )
        )

    for row in rows:
        if row.status == RowStatus.INVALID:
            _log(row, "reject_row", row.reason.value)
            continue

        if row.matched_rule_id:
            label = row.matched_rule_name or row.matched_rule_id
            _log(row, "inject_dial_code",
                 f"Rule '{label}' assigned {row.matched_rule_dial_code}", row.normalized)

        if row.status == RowStatus.DUPLICATE:
            _log(row, "mark_duplicate",
                 f"Same phone as row {kept_by_phone.get(row.normalized)}", row.normalized)

    return entries


# ─────────────────────────────────────────────────────────────────────────────
# Report
# ─────────────────────────────────────────────────────────────────────────────

def build_report(
    rows: Sequence[NormalizedRow],
    settings: CleaningSettings,
    hints: InputHints,
    duration_ms: float,
) -> CleaningReport:
    valid_rows = ensure_name_normalized(r for r in rows if r.status == RowStatus.VALID)
    invalid_rows = [r for r in rows if r.status == RowStatus.INVALID]

    deduped = dedupe_rows(valid_rows, settings.detect_name_duplicates)
    all_rows = [deduped.classified.get(r.index, r) for r in rows]

    stats = CleaningStats(
        total=len(all_rows),
        valid=len(valid_rows),
        unique=len(deduped.unique),
        duplicate=len(deduped.duplicates),
        invalid=len(invalid_rows),
    )
    kept_by_phone = {r.normalized: r.index for r in deduped.unique}

    logger.info(
        "Cleaned {} rows: {} unique, {} duplicate, {} invalid",
        stats.total, stats.unique, stats.duplicate, stats.invalid,
    )

    return CleaningReport(
        rows=all_rows,
        unique=deduped.unique,
        duplicates=deduped.duplicates,
        invalid=invalid_rows,
        duplicate_groups_by_phone=deduped.duplicate_groups_by_phone,
        duplicate_groups_by_name_phone=deduped.duplicate_groups_by_name_phone,
        duplicate_groups_by_name=deduped.duplicate_groups_by_name,
        stats=stats,
        hints=hints,
        created_at=time.time(),
        duration_ms=duration_ms,
        audit_log=build_audit_log(all_rows, kept_by_phone),
    )


def clean_text(
    text: str,
    settings: CleaningSettings,
    countries: Iterable[Country],
    on_progress: Optional[ProgressCallback] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> CleaningReport:
    """Run the whole pipeline; `on_progress(processed, total)` fires after every chunk."""
    started = time.perf_counter()
    lines = split_lines(text)
    hints = analyze_input(lines)
    context = build_processing_context(countries, settings)

    total = len(lines)
    chunk_size = max(1, chunk_size)
    rows: List[NormalizedRow] = []

    for start in range(0, total, chunk_size):
        for position in range(start, min(start + chunk_size, total)):
            rows.append(process_line(lines[position], position, context, hints))
        if on_progress is not None:
            on_progress(len(rows), total)

    duration_ms = (time.perf_counter() - started) * 1000
    return build_report(rows, settings, hints, duration_ms)


def run_cleaning(
    text: str,
    settings: CleaningSettings,
    countries: Iterable[Country],
    on_progress: Optional[ProgressCallback] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> CleaningRun:
    """Batch boundary: an unexpected fault becomes one error outcome, never a partial report."""
    try:
        report = clean_text(text, settings, countries, on_progress=on_progress, chunk_size=chunk_size)
    except Exception as e:
        logger.exception("Phone cleaning batch failed")
        return CleaningRun(ok=False, error=str(e) or type(e).__name__)
    return CleaningRun(ok=True, report=report)
