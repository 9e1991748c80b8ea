"""
Tank event (maintenance history) API endpoints
"""
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from tankcare.api.deps import get_clock, get_current_owner_id, get_db
from tankcare.application.events import DeleteEventUseCase, LogEventUseCase
from tankcare.domain.event import EventType, load_event_data, summarize
from tankcare.infrastructure.db.models import TankEventModel
from tankcare.infrastructure.eventlog.repository import TankEventRepository
from tankcare.utils.clock import Clock


router = APIRouter(prefix="/api/v1", tags=["events"])


class LogEventRequest(BaseModel):
    parent_id: str
    event_type: str
    occurred_at: datetime | None = None
    notes: str | None = None
    data: dict[str, Any] | None = None


class EventResponse(BaseModel):
    id: str
    parent_id: str
    event_type: str
    label: str
    occurred_at: datetime
    notes: str
    data: dict[str, Any]
    details: str

    @classmethod
    def from_model(cls, e: TankEventModel) -> "EventResponse":
        return cls(
            id=e.id,
            parent_id=e.parent_id,
            event_type=e.event_type,
            label=EventType(e.event_type).label,
            occurred_at=e.occurred_at,
            notes=e.notes,
            data=e.data_json,
            details=summarize(load_event_data(e.data_json)),
        )


@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def log_event(
    body: LogEventRequest,
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    event = LogEventUseCase(db, clock).execute(owner_id, **body.model_dump())
    return EventResponse.from_model(event)


@router.get("/tanks/{parent_id}/events", response_model=list[EventResponse])
def list_tank_events(
    parent_id: str,
    limit: int = Query(50, ge=1, le=200),
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    events = TankEventRepository(db).list_by_parent(owner_id, parent_id, limit=limit)
    return [EventResponse.from_model(e) for e in events]


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: str,
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    DeleteEventUseCase(db).execute(event_id, owner_id)
