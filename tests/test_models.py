"""Tests for wire models."""

from datetime import date

from app.tracker.models import Dashboard, SettingsSubmission, SleepLog, SleepSubmission, User


class TestSubmissions:
    def test_camel_case_input(self):
        sub = SleepSubmission.model_validate(
            {"ownerId": 1, "date": "2026-03-10", "sleepStart": "23:00", "sleepEnd": "07:00"}
        )
        assert sub.owner_id == 1
        assert sub.log_date == "2026-03-10"
        assert sub.sleep_start == "23:00"

    def test_snake_case_input(self):
        sub = SleepSubmission(owner_id=1, log_date="2026-03-10")
        assert sub.sleep_end is None

    def test_settings_fields_set(self):
        sub = SettingsSubmission.model_validate({"ownerId": 1, "targetWeightKg": 70})
        assert "target_weight_kg" in sub.model_fields_set
        assert "target_sleep_hours" not in sub.model_fields_set


class TestRecords:
    def test_sleep_log_from_row(self):
        row = {
            "owner_id": 1,
            "log_date": "2026-03-10",
            "sleep_start": "23:00",
            "sleep_end": "07:00",
            "hours": 8,
            "quality": 8,
            "note": None,
        }
        record = SleepLog.model_validate(row)
        assert record.log_date == date(2026, 3, 10)
        assert record.to_json() == {
            "ownerId": 1,
            "date": "2026-03-10",
            "sleepStart": "23:00",
            "sleepEnd": "07:00",
            "hours": 8.0,
            "quality": 8,
            "note": None,
        }

    def test_user_ignores_extra_columns(self):
        user = User.model_validate({"id": 1, "username": None, "created_at": "x"})
        assert user.target_weight_kg is None

    def test_empty_dashboard(self):
        data = Dashboard().to_json()
        assert data == {
            "sleep": [],
            "weight": [],
            "targets": {"targetWeightKg": None, "targetSleepHours": None},
        }
