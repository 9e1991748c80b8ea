"""
In-app notification API endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from tankcare.api.deps import get_current_owner_id, get_db
from tankcare.application.notifications import NotificationService
from tankcare.infrastructure.db.models import NotificationModel


router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    body: str
    created_at: datetime
    expires_at: datetime
    read: bool
    dismissed: bool
    schedule_id: str
    parent_id: str
    parent_name: str
    action_url: str | None

    @classmethod
    def from_model(cls, n: NotificationModel) -> "NotificationResponse":
        return cls(
            id=n.id,
            type=n.type,
            title=n.title,
            body=n.body,
            created_at=n.created_at,
            expires_at=n.expires_at,
            read=n.read,
            dismissed=n.dismissed,
            schedule_id=n.source_schedule_id,
            parent_id=n.source_parent_id,
            parent_name=n.source_parent_name,
            action_url=n.action_url,
        )


class NotificationListResponse(BaseModel):
    unread: int
    items: list[NotificationResponse]


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    limit: int = Query(20, ge=1, le=100),
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    service = NotificationService(db)
    return NotificationListResponse(
        unread=service.unread_count(owner_id),
        items=[NotificationResponse.from_model(n) for n in service.list_for_owner(owner_id, limit)],
    )


@router.post("/{notification_id}/read")
def mark_read(
    notification_id: str,
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    NotificationService(db).mark_read(notification_id, owner_id)
    return {"success": True}


@router.post("/{notification_id}/dismiss")
def dismiss(
    notification_id: str,
    owner_id: str = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    NotificationService(db).mark_dismissed(notification_id, owner_id)
    return {"success": True}
