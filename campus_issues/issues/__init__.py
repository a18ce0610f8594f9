"""
Issue lifecycle: schemas, access rules and the service layer.

The HTTP routes live in ``campus_issues.issues.routes``.
"""

from .access import IssueScope, allowed_update_fields, can_view, scope_filter
from .schemas import (
    CommentCreate,
    DashboardStats,
    DepartmentStats,
    IssueCreate,
    IssueFilters,
    IssueUpdate,
    Location,
    Pagination,
    Principal,
)
from .services import IssueService

__all__ = [
    "CommentCreate",
    "DashboardStats",
    "DepartmentStats",
    "IssueCreate",
    "IssueFilters",
    "IssueScope",
    "IssueService",
    "IssueUpdate",
    "Location",
    "Pagination",
    "Principal",
    "allowed_update_fields",
    "can_view",
    "scope_filter",
]
