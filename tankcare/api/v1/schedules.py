"""
Maintenance schedule API endpoints
"""
from datetime import datetime, tzinfo

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from tankcare.api.deps import get_clock, get_current_owner_id, get_db, get_timezone
from tankcare.application.maintenance_view import MaintenanceView, SchedulePill
from tankcare.application.schedules import (
    CompleteScheduleUseCase,
    CreateScheduleUseCase,
    DeleteScheduleUseCase,
    UpdateScheduleUseCase,
)
from tankcare.domain.errors import NotFoundError
from tankcare.domain.schedule import display_label
from tankcare.infrastructure.db.models import ScheduleModel
from tankcare.infrastructure.schedules.repository import ScheduleRepository
from tankcare.utils.clock import Clock


router = APIRouter(prefix="/api/v1", tags=["schedules"])


# === Request/Response models ===

class CreateScheduleRequest(BaseModel):
    parent_id: str
    parent_name: str | None = None
    task_type: str
    custom_label: str | None = None
    interval_days: int | None = None  # task type default when omitted
    next_due: datetime | None = None  # now when omitted
    enabled: bool = True
    notes: str | None = None


class UpdateScheduleRequest(BaseModel):
    parent_name: str | None = None
    task_type: str | None = None
    custom_label: str | None = None
    interval_days: int | None = None
    next_due: datetime | None = None
    enabled: bool | None = None
    notes: str | None = None


class ScheduleResponse(BaseModel):
    id: str
    parent_id: str
    parent_name: str
    task_type: str
    custom_label: str
    label: str
    interval_days: int
    next_due: datetime
    enabled: bool
    notes: str
    last_completed_at: datetime | None

    @classmethod
    def from_model(cls, s: ScheduleModel) -> "ScheduleResponse":
        return cls(
            id=s.id,
            parent_id=s.parent_id,
            parent_name=s.parent_name,
            task_type=s.task_type,
            custom_label=s.custom_label,
            label=display_label(s.task_type, s.custom_label),
            interval_days=s.interval_days,
            next_due=s.next_due,
            enabled=s.enabled,
            notes=s.notes,
            last_completed_at=s.last_completed_at,
        )


class CompleteScheduleResponse(BaseModel):
    schedule: ScheduleResponse
    event_id: str


class SchedulePillResponse(BaseModel):
    schedule_id: str
    task_type: str
    label: str
    interval_days: int
    next_due: datetime
    enabled: bool
    status_label: str
    urgency: str
    can_complete: bool

    @classmethod
    def from_pill(cls, p: SchedulePill) -> "SchedulePillResponse":
        return cls(
            schedule_id=p.schedule_id,
            task_type=p.task_type.value,
            label=p.label,
            interval_days=p.interval_days,
            next_due=p.next_due,
            enabled=p.enabled,
            status_label=p.status.label,
            urgency=p.status.urgency.value,
            can_complete=p.can_complete,
        )


class HistoryEntryResponse(BaseModel):
    event_id: str
    event_type: str
    label: str
    occurred_at: datetime
    notes: str
    details: str
    from_schedule: str | None


class TankMaintenanceResponse(BaseModel):
    parent_id: str
    schedules: list[SchedulePillResponse]
    recent_events: list[HistoryEntryResponse]


# === Endpoints ===

@router.post("/schedules", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
def create_schedule(
    body: CreateScheduleRequest,
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    schedule = CreateScheduleUseCase(db, clock).execute(owner_id, **body.model_dump())
    return ScheduleResponse.from_model(schedule)


@router.get("/schedules", response_model=list[ScheduleResponse])
def list_schedules(
    parent_id: str | None = None,
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    schedules = ScheduleRepository(db).list_by_owner(owner_id, parent_id)
    return [ScheduleResponse.from_model(s) for s in schedules]


@router.get("/schedules/{schedule_id}", response_model=ScheduleResponse)
def get_schedule(
    schedule_id: str,
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    schedule = ScheduleRepository(db).get_for_owner(schedule_id, owner_id)
    if schedule is None:
        raise NotFoundError(f"Schedule {schedule_id} not found")
    return ScheduleResponse.from_model(schedule)


@router.patch("/schedules/{schedule_id}", response_model=ScheduleResponse)
def update_schedule(
    schedule_id: str,
    body: UpdateScheduleRequest,
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    changes = body.model_dump(exclude_unset=True)
    schedule = UpdateScheduleUseCase(db, clock).execute(schedule_id, owner_id, **changes)
    return ScheduleResponse.from_model(schedule)


@router.delete("/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    schedule_id: str,
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    DeleteScheduleUseCase(db).execute(schedule_id, owner_id)


@router.post("/schedules/{schedule_id}/complete", response_model=CompleteScheduleResponse)
def complete_schedule(
    schedule_id: str,
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    tz: tzinfo = Depends(get_timezone),
):
    schedule, event = CompleteScheduleUseCase(db, clock, tz).execute(schedule_id, owner_id)
    return CompleteScheduleResponse(schedule=ScheduleResponse.from_model(schedule), event_id=event.id)


@router.get("/tanks/{parent_id}/maintenance", response_model=TankMaintenanceResponse)
def tank_maintenance(
    parent_id: str,
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    tz: tzinfo = Depends(get_timezone),
):
    view = MaintenanceView(db, owner_id, clock=clock, tz=tz)
    return TankMaintenanceResponse(
        parent_id=parent_id,
        schedules=[SchedulePillResponse.from_pill(p) for p in view.schedule_pills(parent_id)],
        recent_events=[HistoryEntryResponse(**vars(e)) for e in view.history(parent_id)],
    )
