from __future__ import annotations

import io
from functools import lru_cache
from typing import List

from celery.result import AsyncResult
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from phone_cleaner.celery_app import celery_app
from phone_cleaner.config import settings
from phone_cleaner.models.phone import CleaningReport, Country
from phone_cleaner.schemas.cleaning import (
    CleaningReportResponse,
    CleanTextRequest,
    CountryResponse,
    JobCreatedResponse,
    JobStatusResponse,
    PresetResponse,
)
from phone_cleaner.services.countries import load_countries
from phone_cleaner.services.export import VIEWS, report_to_csv
from phone_cleaner.services.presets import PRESETS
from phone_cleaner.services.report import run_cleaning
from phone_cleaner.tasks.clean_text import clean_text_task

router = APIRouter(prefix="/phone-cleaning", tags=["phone-cleaning"])


@lru_cache()
def get_country_table() -> List[Country]:
    return load_countries(settings.COUNTRIES_FILE)


def _clean_or_500(payload: CleanTextRequest, countries: List[Country]) -> CleaningReport:
    run = run_cleaning(
        payload.text,
        payload.settings.to_settings(),
        countries,
        chunk_size=settings.CHUNK_SIZE,
    )
    if not run.ok:
        raise HTTPException(status_code=500, detail=f"Cleaning failed: {run.error}")
    return run.report


# ─────────────────────────────────────────────────────────────────────────────
# Synchronous cleaning
# ─────────────────────────────────────────────────────────────────────────────

@router.post("/clean", response_model=CleaningReportResponse)
def clean(payload: CleanTextRequest, countries: List[Country] = Depends(get_country_table)):
    """Clean a block of text and return the full classified report."""
    report = _clean_or_500(payload, countries)
    return CleaningReportResponse.model_validate(report)


@router.post("/export")
def export(
    payload: CleanTextRequest,
    view: str = "unique",
    countries: List[Country] = Depends(get_country_table),
):
    """Clean a block of text and stream one report view as CSV."""
    if view not in VIEWS:
        raise HTTPException(status_code=400, detail=f"Unknown view '{view}'")

    report = _clean_or_500(payload, countries)
    buffer = io.StringIO(report_to_csv(report, view))
    return StreamingResponse(
        buffer,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=phones_{view}.csv"},
    )


# ─────────────────────────────────────────────────────────────────────────────
# Background jobs
# ─────────────────────────────────────────────────────────────────────────────

@router.post("/jobs", response_model=JobCreatedResponse, status_code=202)
def create_job(payload: CleanTextRequest):
    """Queue a cleaning run; poll /jobs/{job_id}/status for progress and the report."""
    result = clean_text_task.delay(payload.text, payload.settings.model_dump(mode="json"))
    return JobCreatedResponse(job_id=result.id, status="pending")


@router.get("/jobs/{job_id}/status", response_model=JobStatusResponse)
def get_job_status(job_id: str):
    """Poll processing status of a job (pending → processing → completed/failed)."""
    result = AsyncResult(job_id, app=celery_app)

    if result.state == "PROGRESS":
        meta = result.info or {}
        processed = meta.get("processed", 0)
        total = meta.get("total", 0)
        return JobStatusResponse(
            job_id=job_id,
            status="processing",
            progress=int(processed / total * 100) if total else 0,
            processed=processed,
            total=total,
        )

    if result.state == "SUCCESS":
        outcome = result.result or {}
        if outcome.get("status") != "completed":
            return JobStatusResponse(job_id=job_id, status="failed", error_message=outcome.get("error"))
        report = CleaningReportResponse.model_validate(outcome["report"])
        return JobStatusResponse(
            job_id=job_id,
            status="completed",
            progress=100,
            processed=report.stats.total,
            total=report.stats.total,
            report=report,
        )

    if result.state == "FAILURE":
        return JobStatusResponse(job_id=job_id, status="failed", error_message=str(result.info))

    status_map = {"PENDING": "pending", "STARTED": "processing", "RETRY": "pending"}
    return JobStatusResponse(job_id=job_id, status=status_map.get(result.state, "pending"), progress=0)


# ─────────────────────────────────────────────────────────────────────────────
# Reference data
# ─────────────────────────────────────────────────────────────────────────────

@router.get("/countries", response_model=list[CountryResponse])
def list_countries(countries: List[Country] = Depends(get_country_table)):
    return [CountryResponse.model_validate(c) for c in countries]


@router.get("/presets", response_model=list[PresetResponse])
def list_presets():
    return [PresetResponse.model_validate(p) for p in PRESETS]
