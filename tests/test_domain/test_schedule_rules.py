"""Tests for schedule validation and cadence-preserving completion"""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from tankcare.domain.due_status import days_until
from tankcare.domain.errors import ValidationError
from tankcare.domain.schedule import (
    TankSchedule,
    TaskType,
    display_label,
    next_due_after_completion,
    validate_interval_days,
)

NOW = datetime(2026, 1, 2, 9, 0, tzinfo=timezone.utc)


class TestCreate:
    def test_defaults(self):
        fields = TankSchedule.create("u1", "tank-1", "waterChange", NOW)
        assert fields["task_type"] == "waterChange"
        assert fields["interval_days"] == 7
        assert fields["next_due"] == NOW
        assert fields["enabled"] is True
        assert fields["custom_label"] == ""

    def test_default_interval_per_type(self):
        fields = TankSchedule.create("u1", "tank-1", TaskType.FILTER_MAINTENANCE, NOW)
        assert fields["interval_days"] == 30

    def test_explicit_next_due_kept(self):
        due = datetime(2026, 2, 1, tzinfo=timezone.utc)
        assert TankSchedule.create("u1", "tank-1", "gravel", NOW, next_due=due)["next_due"] == due

    def test_custom_requires_label(self):
        with pytest.raises(ValidationError):
            TankSchedule.create("u1", "tank-1", "custom", NOW, custom_label="")

    def test_custom_whitespace_label_rejected(self):
        with pytest.raises(ValidationError):
            TankSchedule.create("u1", "tank-1", "custom", NOW, custom_label="   ")

    def test_custom_label_stripped(self):
        fields = TankSchedule.create("u1", "tank-1", "custom", NOW, custom_label=" Dose CO2 ")
        assert fields["custom_label"] == "Dose CO2"

    def test_label_ignored_for_builtin_type(self):
        fields = TankSchedule.create("u1", "tank-1", "plantTrim", NOW, custom_label="ignored")
        assert fields["custom_label"] == ""

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            TankSchedule.create("u1", "tank-1", "vacuumTheCat", NOW)


class TestIntervalDays:
    @pytest.mark.parametrize("value", [1, 7, 365])
    def test_valid(self, value):
        assert validate_interval_days(value) == value

    @pytest.mark.parametrize("value", [0, -1, 366, 1.5, "7", True, None])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            validate_interval_days(value)


class TestUpdate:
    CURRENT = {
        "owner_id": "u1", "parent_id": "tank-1", "parent_name": "Tank",
        "task_type": "waterChange", "custom_label": "", "interval_days": 7,
        "next_due": NOW, "enabled": True, "notes": "",
    }

    def test_merged_validation_switch_to_custom_without_label(self):
        with pytest.raises(ValidationError):
            TankSchedule.update(self.CURRENT, NOW, task_type="custom")

    def test_switch_to_custom_with_label(self):
        fields = TankSchedule.update(self.CURRENT, NOW, task_type="custom", custom_label="Top off")
        assert fields["custom_label"] == "Top off"

    def test_interval_out_of_range(self):
        with pytest.raises(ValidationError):
            TankSchedule.update(self.CURRENT, NOW, interval_days=400)

    def test_next_due_cannot_be_cleared(self):
        with pytest.raises(ValidationError):
            TankSchedule.update(self.CURRENT, NOW, next_due=None)

    def test_unknown_field(self):
        with pytest.raises(ValidationError):
            TankSchedule.update(self.CURRENT, NOW, owner_id="u2")

    def test_pause(self):
        fields = TankSchedule.update(self.CURRENT, NOW, enabled=False)
        assert fields["enabled"] is False
        assert "next_due" not in fields


class TestCompletion:
    @pytest.mark.parametrize("interval", [1, 7, 30, 365])
    def test_advances_from_previous_due(self, interval):
        due = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert next_due_after_completion(due, interval) == due + timedelta(days=interval)

    def test_early_completion_keeps_cadence(self):
        due = NOW + timedelta(days=20)
        fields = TankSchedule.complete(due, 7, NOW)
        assert fields["next_due"] == due + timedelta(days=7)
        assert fields["last_completed_at"] == NOW

    def test_local_calendar_across_dst_start(self):
        berlin = ZoneInfo("Europe/Berlin")
        # 23:30 CET, four days before clocks go forward on March 29
        due = datetime(2026, 3, 24, 23, 30, tzinfo=berlin)

        next_due = next_due_after_completion(due, 7, berlin)

        assert next_due.astimezone(berlin) == datetime(2026, 3, 31, 23, 30, tzinfo=berlin)
        assert days_until(next_due, due, berlin) == 7
        assert next_due - due == timedelta(days=7, hours=-1)

    def test_local_calendar_across_dst_end(self):
        berlin = ZoneInfo("Europe/Berlin")
        due = datetime(2026, 10, 20, 0, 15, tzinfo=berlin)

        next_due = next_due_after_completion(due, 14, berlin)

        assert next_due.astimezone(berlin) == datetime(2026, 11, 3, 0, 15, tzinfo=berlin)
        assert days_until(next_due, due, berlin) == 14

    def test_result_is_utc(self):
        due = datetime(2026, 3, 24, 23, 30, tzinfo=ZoneInfo("Europe/Berlin"))
        assert next_due_after_completion(due, 7, ZoneInfo("Europe/Berlin")).tzinfo == timezone.utc


def test_display_label():
    assert display_label("waterChange") == "Water Change"
    assert display_label("gravel") == "Gravel Vacuum"
    assert display_label("custom", "Dose ferts") == "Dose ferts"
    assert display_label("custom", "") == "Custom Task"
