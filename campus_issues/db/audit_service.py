"""
Audit Log Service.

Records audit events for issue operations. Entries are added to the caller's
session and committed together with the change they describe.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..enums import AuditAction
from ..ids import generate_ulid
from .audit_models import AuditLogModel


class AuditService:
    """Service for managing audit log entries.

    Usage:
        audit = AuditService(db_session)
        audit.log_create("Issue", issue.id, issue.snapshot(), actor_role="student", actor_id=user_id)
    """

    def __init__(self, db: Session):
        self.db = db

    def _log(
        self,
        action: AuditAction,
        entity_kind: str,
        entity_id: str,
        before: Optional[Dict[str, Any]],
        after: Optional[Dict[str, Any]],
        actor_role: str,
        actor_id: str,
        note: Optional[str],
    ) -> AuditLogModel:
        entry = AuditLogModel(
            id=generate_ulid(),
            ts=datetime.now(timezone.utc),
            actor_role=actor_role,
            actor_id=actor_id,
            action=action.value,
            entity_kind=entity_kind,
            entity_id=entity_id,
            before=before,
            after=after,
            note=note,
        )
        self.db.add(entry)
        return entry

    def log_create(
        self,
        entity_kind: str,
        entity_id: str,
        after: Dict[str, Any],
        actor_role: str = "system",
        actor_id: str = "unknown",
        note: Optional[str] = None,
    ) -> AuditLogModel:
        """Log the creation of an entity."""
        return self._log(
            AuditAction.CREATED, entity_kind, entity_id, None, after,
            actor_role, actor_id, note,
        )

    def log_update(
        self,
        entity_kind: str,
        entity_id: str,
        before: Dict[str, Any],
        after: Dict[str, Any],
        actor_role: str = "system",
        actor_id: str = "unknown",
        note: Optional[str] = None,
    ) -> AuditLogModel:
        """Log an update to an entity.

        Args:
            entity_kind: Type of entity (e.g., "Issue")
            entity_id: ID of the entity
            before: Mutable fields before the update
            after: Mutable fields after the update
            actor_role: Role of the acting principal, or "system"
            actor_id: ID of the actor
            note: Optional human-readable note
        """
        return self._log(
            AuditAction.UPDATED, entity_kind, entity_id, before, after,
            actor_role, actor_id, note,
        )

    def log_status_change(
        self,
        entity_kind: str,
        entity_id: str,
        old_status: str,
        new_status: str,
        actor_role: str = "system",
        actor_id: str = "unknown",
        note: Optional[str] = None,
    ) -> AuditLogModel:
        """Log a status transition."""
        return self._log(
            AuditAction.STATUS_CHANGED,
            entity_kind,
            entity_id,
            {"status": old_status},
            {"status": new_status},
            actor_role,
            actor_id,
            note or f"Status changed from {old_status} to {new_status}",
        )

    def log_comment(
        self,
        entity_kind: str,
        entity_id: str,
        comment: Dict[str, Any],
        actor_role: str = "system",
        actor_id: str = "unknown",
    ) -> AuditLogModel:
        """Log a comment appended to an entity."""
        return self._log(
            AuditAction.COMMENTED, entity_kind, entity_id, None, comment,
            actor_role, actor_id, None,
        )

    def query_by_entity(
        self,
        entity_kind: str,
        entity_id: str,
        limit: int = 100,
    ) -> List[AuditLogModel]:
        """Get audit history for an entity, newest first."""
        return (
            self.db.query(AuditLogModel)
            .filter(
                AuditLogModel.entity_kind == entity_kind,
                AuditLogModel.entity_id == entity_id,
            )
            .order_by(desc(AuditLogModel.ts), desc(AuditLogModel.id))
            .limit(limit)
            .all()
        )

    def query_by_actor(
        self,
        actor_id: str,
        limit: int = 100,
    ) -> List[AuditLogModel]:
        """Get the actions performed by one actor, newest first."""
        return (
            self.db.query(AuditLogModel)
            .filter(AuditLogModel.actor_id == actor_id)
            .order_by(desc(AuditLogModel.ts), desc(AuditLogModel.id))
            .limit(limit)
            .all()
        )
