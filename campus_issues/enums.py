"""
Canonical enums.

These define the allowed values for issue and user fields. Values are the
exact strings exchanged over the API and stored in the database.
"""

from enum import Enum


class Category(str, Enum):
    """Topical classification, assigned automatically at report time."""

    TECHNOLOGY = "technology"
    FURNITURE = "furniture"
    UTILITIES = "utilities"
    FACILITIES = "facilities"
    ACADEMIC = "academic"
    OTHER = "other"


class Priority(str, Enum):
    """Priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]


# Sort rank: higher is more urgent
PRIORITY_RANK = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.CRITICAL: 4,
}


class IssueStatus(str, Enum):
    """Issue lifecycle status.

    The usual progression is pending -> in-progress -> resolved -> closed,
    but any value may be written by an authorized principal.
    """

    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class Department(str, Enum):
    """Operational units that own issues."""

    IT = "IT"
    MAINTENANCE = "maintenance"
    ADMIN = "admin"
    FACILITIES = "facilities"
    ACADEMIC = "academic"


class Role(str, Enum):
    """Principal roles."""

    STUDENT = "student"
    STAFF = "staff"
    ADMIN = "admin"


class AuditAction(str, Enum):
    """Actions recorded in the audit log."""

    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    COMMENTED = "commented"
