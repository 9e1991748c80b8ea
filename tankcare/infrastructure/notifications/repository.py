"""
Notification Store

upsert_by_key() is an INSERT ... ON CONFLICT (id) DO NOTHING, so concurrent
writers racing on the same dispatch key converge on a single row without
locks or catch-and-retry.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from tankcare.domain.errors import ConfigurationError
from tankcare.infrastructure.db.errors import store_errors
from tankcare.infrastructure.db.models import NotificationModel

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class NotificationRepository:
    def __init__(self, db: Session):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        insert = _INSERT_BY_DIALECT.get(dialect)
        if insert is None:
            raise ConfigurationError(f"Notification upsert is not supported on dialect {dialect!r}")
        return insert

    def check_supported(self) -> None:
        """
        Raises:
            ConfigurationError: if the bound database cannot upsert by key
        """
        self._insert()

    def upsert_by_key(self, key: str, fields: Dict[str, Any]) -> bool:
        """
        Create the notification stored under ``key`` unless it already exists.

        Returns:
            True if a new row was written, False if the key was already present
        """
        insert = self._insert()
        values = {**fields, "id": key}
        stmt = (
            insert(NotificationModel)
            .values(**values)
            .on_conflict_do_nothing(index_elements=[NotificationModel.id])
        )
        with store_errors("notification upsert"):
            result = self.db.execute(stmt)
        return result.rowcount == 1

    def get(self, key: str) -> Optional[NotificationModel]:
        with store_errors("notification get"):
            return self.db.get(NotificationModel, key)

    def list_by_owner(
        self,
        owner_id: str,
        limit: int = 20,
        include_dismissed: bool = False,
    ) -> List[NotificationModel]:
        """Owner's notifications, newest first"""
        with store_errors("notification list"):
            query = self.db.query(NotificationModel).filter(NotificationModel.owner_id == owner_id)
            if not include_dismissed:
                query = query.filter(NotificationModel.dismissed.is_(False))
            return (
                query.order_by(NotificationModel.created_at.desc(), NotificationModel.id.asc())
                .limit(limit)
                .all()
            )

    def count_unread(self, owner_id: str) -> int:
        with store_errors("notification count"):
            return (
                self.db.query(NotificationModel)
                .filter(
                    NotificationModel.owner_id == owner_id,
                    NotificationModel.read.is_(False),
                    NotificationModel.dismissed.is_(False),
                )
                .count()
            )

    def _set_flag(self, key: str, owner_id: str, **flags) -> bool:
        with store_errors("notification update"):
            updated = (
                self.db.query(NotificationModel)
                .filter(
                    NotificationModel.id == key,
                    NotificationModel.owner_id == owner_id,
                )
                .update(flags, synchronize_session="fetch")
            )
        return updated > 0

    def mark_read(self, key: str, owner_id: str) -> bool:
        return self._set_flag(key, owner_id, read=True)

    def mark_dismissed(self, key: str, owner_id: str) -> bool:
        return self._set_flag(key, owner_id, dismissed=True)

    def purge_expired(self, now: datetime) -> int:
        """Delete notifications whose expires_at has passed. Returns rows deleted."""
        with store_errors("notification purge"):
            return (
                self.db.query(NotificationModel)
                .filter(NotificationModel.expires_at <= now)
                .delete(synchronize_session=False)
            )
