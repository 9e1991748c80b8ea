"""Tests for tank event payload variants"""
from datetime import datetime, timezone

import pytest

from tankcare.domain.errors import ValidationError
from tankcare.domain.event import (
    COMPLETED_FROM_SCHEDULE_NOTE,
    EventType,
    GenericData,
    ParameterTestData,
    StockingData,
    TankEvent,
    WaterChangeData,
    build_event_data,
    completion_event_type,
    load_event_data,
    summarize,
)

NOW = datetime(2026, 1, 2, 9, 0, tzinfo=timezone.utc)


class TestBuildEventData:
    def test_kind_filled_from_event_type(self):
        data = build_event_data(EventType.WATER_CHANGE, {"percentChanged": 30})
        assert isinstance(data, WaterChangeData)
        assert data.percent_changed == 30

    def test_snake_case_names_accepted(self):
        data = build_event_data(EventType.WATER_CHANGE, {"percent_changed": 25})
        assert data.percent_changed == 25

    def test_fish_events_share_stocking_payload(self):
        data = build_event_data(EventType.FISH_REMOVED, {"speciesKey": "neon", "quantity": 2})
        assert isinstance(data, StockingData)

    def test_types_without_payload_use_generic(self):
        assert isinstance(build_event_data(EventType.GLASS_CLEAN, None), GenericData)

    def test_kind_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            build_event_data(EventType.WATER_CHANGE, {"kind": "parameterTest", "ph": 7.0})

    def test_out_of_range_value_rejected(self):
        with pytest.raises(ValidationError):
            build_event_data(EventType.WATER_CHANGE, {"percentChanged": 150})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            build_event_data(EventType.PARAMETER_TEST, {"salinity": 1.02})


class TestStoredPayload:
    def test_json_uses_camel_case_and_drops_empty_fields(self):
        data = WaterChangeData(percent_changed=50, from_schedule="s1")
        assert data.to_json() == {
            "kind": "waterChange", "percentChanged": 50, "fromSchedule": "s1",
        }

    def test_load_restores_variant(self):
        data = load_event_data({"kind": "parameterTest", "ph": 7.2})
        assert isinstance(data, ParameterTestData)
        assert data.ph == 7.2

    def test_load_missing_payload(self):
        assert isinstance(load_event_data(None), GenericData)


class TestSummarize:
    def test_water_change(self):
        assert summarize(WaterChangeData(percent_changed=50)) == "50% changed"

    def test_parameter_test(self):
        data = ParameterTestData(ammonia=0.25, ph=7.2)
        assert summarize(data) == "NH3: 0.25, pH: 7.2"

    def test_stocking(self):
        assert summarize(StockingData(species_key="neon", quantity=3)) == "3x neon"

    def test_nothing_to_show(self):
        assert summarize(GenericData()) == ""


class TestCompletionEvent:
    def test_builtin_type_maps_to_same_event_type(self):
        assert completion_event_type("filterMaintenance") is EventType.FILTER_MAINTENANCE

    def test_custom_maps_to_note(self):
        assert completion_event_type("custom") is EventType.NOTE

    def test_completion_payload_links_schedule(self):
        fields = TankEvent.completion("u1", "tank-1", "sched-1", "waterChange", NOW)
        assert fields["event_type"] == "waterChange"
        assert fields["notes"] == COMPLETED_FROM_SCHEDULE_NOTE
        assert fields["occurred_at"] == NOW
        assert fields["data_json"] == {"kind": "waterChange", "fromSchedule": "sched-1"}


class TestCreate:
    def test_unknown_event_type(self):
        with pytest.raises(ValidationError):
            TankEvent.create("u1", "tank-1", "feedTheCat", NOW)

    def test_occurred_at_defaults_to_now(self):
        fields = TankEvent.create("u1", "tank-1", "note", NOW, notes="  cloudy water ")
        assert fields["occurred_at"] == NOW
        assert fields["notes"] == "cloudy water"

    def test_quick_log_types(self):
        assert EventType.WATER_CHANGE.quick_log
        assert not EventType.NOTE.quick_log
