"""
Tests for the background cleaning task.

The task body is called directly through `.run`; update_state is patched
so no result backend is needed.
"""

from unittest.mock import patch

from phone_cleaner.tasks.clean_text import clean_text_task


class TestCleanTextTask:
    def test_completed_report(self):
        with patch.object(clean_text_task, "update_state") as update_state:
            outcome = clean_text_task.run("Ahmed - 0551234567\nAhmed - +966551234567", {"strict_mode": True})

        assert outcome["status"] == "completed"
        report = outcome["report"]
        assert report["stats"]["total"] == 2
        assert report["stats"]["duplicate"] == 1
        assert report["rows"][1]["status"] == "duplicate"
        update_state.assert_called_with(state="PROGRESS", meta={"processed": 2, "total": 2})

    def test_progress_published_per_chunk(self):
        text = "\n".join(["Ahmed - 0551234567"] * 5)
        with patch("phone_cleaner.tasks.clean_text.settings") as settings, \
                patch.object(clean_text_task, "update_state") as update_state:
            settings.CHUNK_SIZE = 2
            settings.COUNTRIES_FILE = None
            clean_text_task.run(text, {})

        metas = [call.kwargs["meta"] for call in update_state.call_args_list]
        assert metas == [
            {"processed": 2, "total": 5},
            {"processed": 4, "total": 5},
            {"processed": 5, "total": 5},
        ]

    def test_invalid_settings_payload(self):
        with patch.object(clean_text_task, "update_state"):
            outcome = clean_text_task.run("Ahmed - 0551234567", {"strict_mode": "sometimes"})
        assert outcome["status"] == "failed"
        assert outcome["error"]

    def test_batch_failure_reported(self):
        with patch("phone_cleaner.tasks.clean_text.run_cleaning") as run_cleaning:
            run_cleaning.return_value.ok = False
            run_cleaning.return_value.error = "boom"
            outcome = clean_text_task.run("Ahmed - 0551234567", {})
        assert outcome == {"status": "failed", "error": "boom"}

    def test_report_is_json_ready(self):
        with patch.object(clean_text_task, "update_state"):
            outcome = clean_text_task.run("Ali - 0551234567", {})
        row = outcome["report"]["rows"][0]
        assert row["country"]["iso2"] == "SA"
        assert isinstance(outcome["report"]["created_at"], float)
