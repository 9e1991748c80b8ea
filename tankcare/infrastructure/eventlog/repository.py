"""
Event Log Repository - append-only maintenance history per tank

Events are never mutated. The only removal path is an owner deleting one of
their own entries (delete_for_owner); the scheduler never deletes.
"""
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session

from tankcare.infrastructure.db.errors import store_errors
from tankcare.infrastructure.db.models import TankEventModel


class TankEventRepository:
    def __init__(self, db: Session):
        self.db = db

    def append(self, fields: Dict[str, Any]) -> TankEventModel:
        """
        Add an event to the log

        Args:
            fields: validated field values (see TankEvent.create)

        Returns:
            the new event, flushed (id assigned) but not committed

        Example:
            >>> repo = TankEventRepository(db)
            >>> event = repo.append(TankEvent.create("u1", "tank-1", "waterChange", now))
        """
        event = TankEventModel(**fields)
        with store_errors("event append"):
            self.db.add(event)
            self.db.flush()
        return event

    def get_for_owner(self, event_id: str, owner_id: str) -> Optional[TankEventModel]:
        with store_errors("event get"):
            return (
                self.db.query(TankEventModel)
                .filter(
                    TankEventModel.id == event_id,
                    TankEventModel.owner_id == owner_id,
                )
                .first()
            )

    def list_by_parent(self, owner_id: str, parent_id: str, limit: int = 50) -> List[TankEventModel]:
        """
        Events of one tank, newest first

        Args:
            owner_id: tank owner
            parent_id: tank id
            limit: max events returned (default: 50)
        """
        with store_errors("event list"):
            return (
                self.db.query(TankEventModel)
                .filter(
                    TankEventModel.owner_id == owner_id,
                    TankEventModel.parent_id == parent_id,
                )
                .order_by(TankEventModel.occurred_at.desc(), TankEventModel.created_at.desc())
                .limit(limit)
                .all()
            )

    def list_by_owner(self, owner_id: str, limit: int = 100) -> List[TankEventModel]:
        """Events across all tanks of an owner, newest first"""
        with store_errors("event list"):
            return (
                self.db.query(TankEventModel)
                .filter(TankEventModel.owner_id == owner_id)
                .order_by(TankEventModel.occurred_at.desc(), TankEventModel.created_at.desc())
                .limit(limit)
                .all()
            )

    def delete_for_owner(self, event: TankEventModel) -> None:
        with store_errors("event delete"):
            self.db.delete(event)
            self.db.flush()
