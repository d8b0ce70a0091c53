from loguru import logger

from phone_cleaner.celery_app import celery_app
from phone_cleaner.config import settings
from phone_cleaner.schemas.cleaning import CleaningReportResponse, CleaningSettingsPayload
from phone_cleaner.services.countries import load_countries
from phone_cleaner.services.report import run_cleaning


@celery_app.task(bind=True)
def clean_text_task(self, text: str, settings_payload: dict):
    """
    Background task:
      1. Validate the settings payload
      2. Load the country table
      3. Clean the text in chunks, publishing PROGRESS {processed, total}
      4. Return the serialised report (or an error; never a partial report)
    """
    try:
        cleaning_settings = CleaningSettingsPayload.model_validate(settings_payload or {}).to_settings()
        countries = load_countries(settings.COUNTRIES_FILE)

        def _progress(processed: int, total: int) -> None:
            self.update_state(state="PROGRESS", meta={"processed": processed, "total": total})

        run = run_cleaning(
            text,
            cleaning_settings,
            countries,
            on_progress=_progress,
            chunk_size=settings.CHUNK_SIZE,
        )
        if not run.ok:
            return {"status": "failed", "error": run.error}

        report = CleaningReportResponse.model_validate(run.report)
        return {"status": "completed", "report": report.model_dump(mode="json")}

    except Exception as e:
        logger.exception("clean_text_task failed")
        return {"status": "failed", "error": str(e)}
