"""Tank event domain: event types and their typed payloads"""
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from tankcare.domain.errors import ValidationError
from tankcare.domain.schedule import TaskType
from tankcare.utils.clock import to_utc

COMPLETED_FROM_SCHEDULE_NOTE = "Completed from schedule"
NOTES_MAX_LENGTH = 2000


class EventType(str, Enum):
    WATER_CHANGE = "waterChange"
    PARAMETER_TEST = "parameterTest"
    FILTER_MAINTENANCE = "filterMaintenance"
    FEEDING = "feeding"
    GLASS_CLEAN = "glassClean"
    SUBSTRATE_VACUUM = "gravel"
    PLANT_TRIM = "plantTrim"
    FISH_ADDED = "fishAdded"
    FISH_REMOVED = "fishRemoved"
    MEDICATION = "medication"
    PLANT_CHANGE = "plantChange"
    EQUIPMENT_CHANGE = "equipmentChange"
    NOTE = "note"

    @property
    def label(self) -> str:
        return _EVENT_LABELS[self]

    @property
    def quick_log(self) -> bool:
        return self in QUICK_LOG_TYPES


_EVENT_LABELS = {
    EventType.WATER_CHANGE: "Water Change",
    EventType.PARAMETER_TEST: "Parameter Test",
    EventType.FILTER_MAINTENANCE: "Filter Maintenance",
    EventType.FEEDING: "Special Feeding",
    EventType.GLASS_CLEAN: "Glass Cleaning",
    EventType.SUBSTRATE_VACUUM: "Gravel Vacuum",
    EventType.PLANT_TRIM: "Plant Trimming",
    EventType.FISH_ADDED: "Fish Added",
    EventType.FISH_REMOVED: "Fish Removed",
    EventType.MEDICATION: "Medication",
    EventType.PLANT_CHANGE: "Plant Change",
    EventType.EQUIPMENT_CHANGE: "Equipment Change",
    EventType.NOTE: "Note",
}

QUICK_LOG_TYPES = frozenset({
    EventType.WATER_CHANGE,
    EventType.PARAMETER_TEST,
    EventType.FILTER_MAINTENANCE,
})


# ---------------------------------------------------------------------------
# Payload variants (tagged by ``kind``)
# ---------------------------------------------------------------------------

class _EventData(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    from_schedule: str | None = None

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class WaterChangeData(_EventData):
    kind: Literal["waterChange"] = "waterChange"
    percent_changed: int | None = Field(default=None, ge=1, le=100)


class ParameterTestData(_EventData):
    kind: Literal["parameterTest"] = "parameterTest"
    ammonia: float | None = Field(default=None, ge=0)
    nitrite: float | None = Field(default=None, ge=0)
    nitrate: float | None = Field(default=None, ge=0)
    ph: float | None = Field(default=None, ge=0, le=14)


class StockingData(_EventData):
    kind: Literal["stocking"] = "stocking"
    species_key: str | None = None
    quantity: int | None = Field(default=None, ge=1)
    reason: str | None = None


class MedicationData(_EventData):
    kind: Literal["medication"] = "medication"
    medication_name: str | None = None
    dosage: str | None = None


class GenericData(_EventData):
    kind: Literal["generic"] = "generic"


EventData = Annotated[
    Union[WaterChangeData, ParameterTestData, StockingData, MedicationData, GenericData],
    Field(discriminator="kind"),
]

_event_data_adapter: TypeAdapter = TypeAdapter(EventData)

_DATA_CLASS_BY_TYPE: Dict[EventType, type[_EventData]] = {
    EventType.WATER_CHANGE: WaterChangeData,
    EventType.PARAMETER_TEST: ParameterTestData,
    EventType.FISH_ADDED: StockingData,
    EventType.FISH_REMOVED: StockingData,
    EventType.MEDICATION: MedicationData,
}


def data_class_for(event_type: EventType) -> type[_EventData]:
    return _DATA_CLASS_BY_TYPE.get(event_type, GenericData)


def parse_event_type(value: str | EventType) -> EventType:
    try:
        return EventType(value)
    except ValueError:
        raise ValidationError(f"Unknown event type: {value!r}") from None


def build_event_data(event_type: EventType, raw: Dict[str, Any] | None) -> _EventData:
    """
    Validate a raw payload for ``event_type``.

    The ``kind`` tag may be omitted; it is filled in from the event type.
    A payload tagged with another variant's kind is rejected.
    """
    data_class = data_class_for(event_type)
    expected_kind = data_class.model_fields["kind"].default
    raw = dict(raw or {})
    kind = raw.setdefault("kind", expected_kind)
    if kind != expected_kind:
        raise ValidationError(
            f"Payload kind {kind!r} does not match event type {event_type.value!r}"
        )
    try:
        return _event_data_adapter.validate_python(raw)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid {event_type.value} data: {exc}") from exc


def load_event_data(stored: Dict[str, Any] | None) -> _EventData:
    """Rehydrate a stored payload (already validated on write)."""
    return _event_data_adapter.validate_python(stored or {"kind": "generic"})


def completion_event_type(task_type: str | TaskType) -> EventType:
    """Event type logged when a schedule of ``task_type`` is completed."""
    task_type = TaskType(task_type)
    if task_type is TaskType.CUSTOM:
        return EventType.NOTE
    return EventType(task_type.value)


def summarize(data: _EventData) -> str:
    """One-line human summary of a payload, empty when there is nothing to show."""
    if isinstance(data, WaterChangeData) and data.percent_changed:
        return f"{data.percent_changed}% changed"
    if isinstance(data, ParameterTestData):
        parts = []
        if data.ammonia is not None:
            parts.append(f"NH3: {data.ammonia:g}")
        if data.nitrite is not None:
            parts.append(f"NO2: {data.nitrite:g}")
        if data.nitrate is not None:
            parts.append(f"NO3: {data.nitrate:g}")
        if data.ph is not None:
            parts.append(f"pH: {data.ph:g}")
        return ", ".join(parts)
    if isinstance(data, StockingData) and data.species_key:
        return f"{data.quantity or 1}x {data.species_key}"
    if isinstance(data, MedicationData) and data.medication_name:
        if data.dosage:
            return f"{data.medication_name} ({data.dosage})"
        return data.medication_name
    return ""


class TankEvent:
    @staticmethod
    def create(
        owner_id: str,
        parent_id: str,
        event_type: str | EventType,
        now: datetime,
        occurred_at: datetime | None = None,
        notes: str | None = None,
        data: Dict[str, Any] | _EventData | None = None,
    ) -> Dict[str, Any]:
        if not owner_id or not parent_id:
            raise ValidationError("owner_id and parent_id are required")
        event_type = parse_event_type(event_type)
        notes = (notes or "").strip()
        if len(notes) > NOTES_MAX_LENGTH:
            raise ValidationError(f"notes are longer than {NOTES_MAX_LENGTH} characters")
        if isinstance(data, _EventData):
            if not isinstance(data, data_class_for(event_type)):
                raise ValidationError(
                    f"Payload kind {data.kind!r} does not match event type {event_type.value!r}"
                )
            payload = data
        else:
            payload = build_event_data(event_type, data)
        return {
            "owner_id": owner_id,
            "parent_id": parent_id,
            "event_type": event_type.value,
            "occurred_at": to_utc(occurred_at if occurred_at is not None else now),
            "notes": notes,
            "data_json": payload.to_json(),
            "created_at": to_utc(now),
        }

    @staticmethod
    def completion(
        owner_id: str,
        parent_id: str,
        schedule_id: str,
        task_type: str | TaskType,
        now: datetime,
    ) -> Dict[str, Any]:
        event_type = completion_event_type(task_type)
        data = data_class_for(event_type)(from_schedule=schedule_id)
        return TankEvent.create(
            owner_id, parent_id, event_type, now,
            notes=COMPLETED_FROM_SCHEDULE_NOTE,
            data=data,
        )
