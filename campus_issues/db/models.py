"""
SQLAlchemy database models.

Issues keep their location and resolution bookkeeping as flat columns so
they can be filtered on and conditionally updated; comments live in their
own append-only table.
"""

from typing import Any, Dict, Optional

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..enums import Category, Department, IssueStatus, Priority, Role
from .base import Base


def _values(enum_cls) -> list:
    return [member.value for member in enum_cls]


# Store enum *values* ("in-progress"), not member names ("IN_PROGRESS")
category_enum = Enum(*_values(Category), name="issue_category")
priority_enum = Enum(*_values(Priority), name="issue_priority")
status_enum = Enum(*_values(IssueStatus), name="issue_status")
department_enum = Enum(*_values(Department), name="department")
role_enum = Enum(*_values(Role), name="user_role")


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


class UserModel(Base):
    """A person who can report, handle or administer issues."""

    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    name = Column(String(120), nullable=False)
    email = Column(String(254), nullable=False, unique=True, index=True)
    role = Column(role_enum, nullable=False, default=Role.STUDENT.value)
    department = Column(department_enum, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "department": self.department,
            "createdAt": _iso(self.created_at),
        }

    def to_ref(self, with_email: bool = False) -> Dict[str, Any]:
        """Display form used when a user is embedded in an issue."""
        ref = {"id": self.id, "name": self.name}
        if with_email:
            ref["email"] = self.email
        return ref


class IssueModel(Base):
    """A reported campus disruption."""

    __tablename__ = "issues"

    id = Column(String(128), primary_key=True)

    # Core fields
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)
    category = Column(category_enum, nullable=False, index=True)
    priority = Column(priority_enum, nullable=False, default=Priority.MEDIUM.value)
    status = Column(status_enum, nullable=False, default=IssueStatus.PENDING.value)

    # Location
    location_building = Column(String(120), nullable=False)
    location_room = Column(String(60), nullable=True)
    location_floor = Column(String(30), nullable=True)

    # Reporter (lookup only, no cascades)
    reported_by_id = Column(String(128), ForeignKey("users.id"), nullable=False)

    assigned_department = Column(department_enum, nullable=True)

    # Resolution bookkeeping, written once
    resolved_by_id = Column(String(128), ForeignKey("users.id"), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolution_notes = Column(String(500), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=func.now(),
        onupdate=func.now(),
    )

    reporter = relationship("UserModel", foreign_keys=[reported_by_id], lazy="joined")
    resolver = relationship("UserModel", foreign_keys=[resolved_by_id], lazy="joined")
    comments = relationship(
        "IssueCommentModel",
        back_populates="issue",
        order_by="IssueCommentModel.created_at",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_issues_status_priority", "status", "priority"),
        Index("ix_issues_assigned_department", "assigned_department"),
        Index("ix_issues_reported_by", "reported_by_id"),
        Index("ix_issues_created_at", "created_at"),
    )

    def resolution_details(self) -> Optional[Dict[str, Any]]:
        if self.resolved_at is None:
            return None
        return {
            "resolvedBy": self.resolver.to_ref() if self.resolver else None,
            "resolvedAt": _iso(self.resolved_at),
            "resolutionNotes": self.resolution_notes,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation with user references resolved for display."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "priority": self.priority,
            "status": self.status,
            "location": {
                "building": self.location_building,
                "room": self.location_room,
                "floor": self.location_floor,
            },
            "reportedBy": (
                self.reporter.to_ref(with_email=True)
                if self.reporter
                else {"id": self.reported_by_id}
            ),
            "assignedDepartment": self.assigned_department,
            "comments": [c.to_dict() for c in self.comments],
            "resolutionDetails": self.resolution_details(),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def snapshot(self) -> Dict[str, Any]:
        """Mutable fields only, for audit before/after entries."""
        return {
            "status": self.status,
            "priority": self.priority,
            "assignedDepartment": self.assigned_department,
            "resolvedAt": _iso(self.resolved_at),
        }


class IssueCommentModel(Base):
    """Append-only comment on an issue."""

    __tablename__ = "issue_comments"

    id = Column(String(128), primary_key=True)
    issue_id = Column(String(128), ForeignKey("issues.id"), nullable=False, index=True)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now())

    issue = relationship("IssueModel", back_populates="comments")
    user = relationship("UserModel", lazy="joined")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user": self.user.to_ref() if self.user else {"id": self.user_id},
            "text": self.text,
            "createdAt": _iso(self.created_at),
        }
