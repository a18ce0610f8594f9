"""
Access rules for issues.

Listing and statistics are scoped: staff only see their own department,
everyone else sees every issue. Single-issue access is stricter for students,
who may only open and comment on their own reports. Updates only check the
staff department rule; which fields an update may touch is decided per role by
UPDATE_FIELD_PERMISSIONS, and disallowed fields are dropped rather than
rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

import structlog
from sqlalchemy.sql.elements import ColumnElement

from ..db.models import IssueModel
from ..enums import Department, Role
from ..errors import ForbiddenError
from .schemas import IssueUpdate, Principal

logger = structlog.get_logger()

# role -> fields of IssueUpdate that role may change
UPDATE_FIELD_PERMISSIONS: Mapping[Role, FrozenSet[str]] = {
    Role.STUDENT: frozenset({"status", "resolution_notes"}),
    Role.STAFF: frozenset(
        {"status", "priority", "assigned_department", "resolution_notes"}
    ),
    Role.ADMIN: frozenset(
        {"status", "priority", "assigned_department", "resolution_notes"}
    ),
}


@dataclass(frozen=True)
class IssueScope:
    """Visible-issue predicate for list and stats queries."""

    assigned_department: Optional[Department] = None

    def criteria(self) -> List[ColumnElement]:
        if self.assigned_department is None:
            return []
        return [IssueModel.assigned_department == self.assigned_department.value]


def scope_filter(principal: Principal) -> IssueScope:
    """Derive the list/stats visibility scope for a principal."""
    if principal.is_staff and principal.department is not None:
        return IssueScope(assigned_department=principal.department)
    return IssueScope()


def _outside_department(principal: Principal, issue: IssueModel) -> bool:
    department = principal.department.value if principal.department else None
    return principal.is_staff and issue.assigned_department != department


def can_view(principal: Principal, issue: IssueModel) -> bool:
    """Single-issue read and comment rule."""
    if _outside_department(principal, issue):
        return False
    if principal.is_student and issue.reported_by_id != principal.id:
        return False
    return True


def ensure_can_view(principal: Principal, issue: IssueModel, action: str = "access") -> None:
    if not can_view(principal, issue):
        logger.info(
            "access_denied",
            action=action,
            issue_id=issue.id,
            principal_id=principal.id,
            role=principal.role.value,
        )
        raise ForbiddenError(f"Access denied to {action} this issue")


def ensure_can_update(principal: Principal, issue: IssueModel) -> None:
    if _outside_department(principal, issue):
        logger.info(
            "access_denied",
            action="update",
            issue_id=issue.id,
            principal_id=principal.id,
            role=principal.role.value,
        )
        raise ForbiddenError("Access denied to update this issue")


def allowed_update_fields(principal: Principal, update: IssueUpdate) -> Dict[str, Any]:
    """Return the requested changes this principal is allowed to apply.

    Fields left unset (None) are not changes. Disallowed fields are dropped.
    """
    allowed = UPDATE_FIELD_PERMISSIONS.get(principal.role, frozenset())
    requested = update.model_dump(exclude_none=True)

    ignored = sorted(set(requested) - allowed)
    if ignored:
        logger.debug(
            "update_fields_ignored",
            principal_id=principal.id,
            role=principal.role.value,
            fields=ignored,
        )

    return {field: value for field, value in requested.items() if field in allowed}
