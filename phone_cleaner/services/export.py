"""Tabular export of a cleaning report (DataFrame / CSV)."""

from typing import List

import pandas as pd

from phone_cleaner.models.phone import CleaningReport, NormalizedRow

EXPORT_COLUMNS = [
    "index",
    "name",
    "phone_raw",
    "normalized",
    "country",
    "status",
    "reason",
    "matched_rule",
]

VIEWS = ("all", "unique", "duplicates", "invalid")


def _rows_for_view(report: CleaningReport, view: str) -> List[NormalizedRow]:
    if view == "unique":
        return report.unique
    if view == "duplicates":
        return report.duplicates
    if view == "invalid":
        return report.invalid
    if view == "all":
        return report.rows
    raise ValueError(f"Unknown export view '{view}'. Expected one of: {', '.join(VIEWS)}")


def report_to_dataframe(report: CleaningReport, view: str = "all") -> pd.DataFrame:
    records = [
        {
            "index": row.index,
            "name": row.name,
            "phone_raw": row.phone_raw,
            "normalized": row.normalized or "",
            "country": row.country.iso2 if row.country else "",
            "status": row.status.value,
            "reason": row.reason.value if row.reason else "",
            "matched_rule": row.matched_rule_name or row.matched_rule_id or "",
        }
        for row in _rows_for_view(report, view)
    ]
    return pd.DataFrame(records, columns=EXPORT_COLUMNS)


def report_to_csv(report: CleaningReport, view: str = "all") -> str:
    return report_to_dataframe(report, view).to_csv(index=False)
