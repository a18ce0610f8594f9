"""
Audit Log Database Models.

Every state change to an issue is recorded with before/after snapshots and
the acting principal.
"""

from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    Index,
    String,
    Text,
)
from sqlalchemy.sql import func

from ..enums import AuditAction, Role
from .base import Base


audit_actor_role_enum = Enum(
    *[role.value for role in Role],
    "system",
    name="audit_actor_role",
)

audit_action_enum = Enum(
    *[action.value for action in AuditAction],
    name="audit_action",
)


class AuditLogModel(Base):
    """Audit log entry.

    Records who did what to which entity and when, with the relevant state
    before and after the change.
    """

    __tablename__ = "audit_log"

    id = Column(String(36), primary_key=True)

    ts = Column(
        DateTime(timezone=True),
        nullable=False,
        default=func.now(),
        index=True,
    )

    # Who performed the action
    actor_role = Column(audit_actor_role_enum, nullable=False)
    actor_id = Column(String(128), nullable=False, index=True)

    action = Column(audit_action_enum, nullable=False, index=True)

    # What entity was affected
    entity_kind = Column(String(50), nullable=False, index=True)
    entity_id = Column(String(128), nullable=False, index=True)

    before = Column(JSON, nullable=True)
    after = Column(JSON, nullable=True)

    note = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_audit_log_entity", "entity_kind", "entity_id"),
        Index("ix_audit_log_entity_ts", "entity_kind", "entity_id", "ts"),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "ts": self.ts.isoformat() if self.ts else None,
            "actor_role": self.actor_role,
            "actor_id": self.actor_id,
            "action": self.action,
            "entity_kind": self.entity_kind,
            "entity_id": self.entity_id,
            "before": self.before,
            "after": self.after,
            "note": self.note,
        }
