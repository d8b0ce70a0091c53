"""
Deduplication of valid rows.

Three groupings are computed over the valid rows:

  by phone       key = normalized E.164.  The lowest line index is kept,
                 every other member is re-classified as a duplicate.
  by name+phone  key = normalized + "__" + normalized name.  Informational.
  by name        key = normalized name (only when enabled).  Informational.

Rows are never mutated; re-classified copies are returned instead.  Group
ids come from a fresh counter on every pass, so callers should match
groups by key, not by id.
"""

from dataclasses import dataclass, field, replace
from itertools import count
from typing import Callable, Dict, Iterable, List, Optional

from phone_cleaner.models.phone import DuplicateGroup, NormalizedRow, RowStatus
from phone_cleaner.services.digits import normalize_name

KeyFn = Callable[[NormalizedRow], Optional[str]]


@dataclass
class DedupedResults:
    unique: List[NormalizedRow] = field(default_factory=list)
    duplicates: List[NormalizedRow] = field(default_factory=list)
    duplicate_groups_by_phone: List[DuplicateGroup] = field(default_factory=list)
    duplicate_groups_by_name_phone: List[DuplicateGroup] = field(default_factory=list)
    duplicate_groups_by_name: List[DuplicateGroup] = field(default_factory=list)
    # re-classified row for every input row, keyed by line index
    classified: Dict[int, NormalizedRow] = field(default_factory=dict)


def ensure_name_normalized(rows: Iterable[NormalizedRow]) -> List[NormalizedRow]:
    return [replace(row, name_normalized=normalize_name(row.name) if row.name else "") for row in rows]


def _group_by(rows: Iterable[NormalizedRow], key_fn: KeyFn) -> Dict[str, List[NormalizedRow]]:
    groups: Dict[str, List[NormalizedRow]] = {}
    for row in rows:
        key = key_fn(row)
        if not key:
            continue
        groups.setdefault(key, []).append(row)
    return groups


def build_groups(rows: Iterable[NormalizedRow], key_fn: KeyFn, id_prefix: str) -> List[DuplicateGroup]:
    """Informational grouping: every key shared by two or more rows becomes a group."""
    sequence = count(1)
    result = []
    for key, items in _group_by(rows, key_fn).items():
        if len(items) < 2:
            continue
        items = sorted(items, key=lambda r: r.index)
        result.append(
            DuplicateGroup(
                id=f"{id_prefix}_{next(sequence)}",
                key=key,
                canonical_phone=items[0].normalized,
                items=tuple(items),
                kept_index=items[0].index,
            )
        )
    return result


def _name_phone_key(row: NormalizedRow) -> Optional[str]:
    name = (row.name_normalized or "").strip()
    if not row.normalized or not name:
        return None
    return f"{row.normalized}__{name}"


def _name_key(row: NormalizedRow) -> Optional[str]:
    return (row.name_normalized or "").strip() or None


def dedupe_rows(rows: Iterable[NormalizedRow], detect_name_duplicates: bool) -> DedupedResults:
    results = DedupedResults()
    sequence = count(1)

    for phone, items in _group_by(rows, lambda r: r.normalized).items():
        items = sorted(items, key=lambda r: r.index)
        first, rest = items[0], items[1:]

        kept = replace(first, status=RowStatus.VALID, is_kept=True)
        demoted = [replace(row, status=RowStatus.DUPLICATE, is_kept=False) for row in rest]

        results.unique.append(kept)
        results.duplicates.extend(demoted)
        results.classified[kept.index] = kept
        for row in demoted:
            results.classified[row.index] = row

        if demoted:
            results.duplicate_groups_by_phone.append(
                DuplicateGroup(
                    id=f"phone_{next(sequence)}",
                    key=phone,
                    canonical_phone=phone,
                    items=tuple([kept] + demoted),
                    kept_index=kept.index,
                )
            )

    classified_rows = sorted(results.classified.values(), key=lambda r: r.index)
    results.duplicate_groups_by_name_phone = build_groups(classified_rows, _name_phone_key, "group")
    if detect_name_duplicates:
        results.duplicate_groups_by_name = build_groups(classified_rows, _name_key, "name")

    return results
