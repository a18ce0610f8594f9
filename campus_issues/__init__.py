"""
Campus Issues

Campus disruption reporting with automatic triage, department routing and
resolution tracking.
"""

import importlib.metadata

__version__ = importlib.metadata.version("campus-issues")

from .enums import Category, Department, IssueStatus, Priority, Role
from .errors import (
    AuthenticationError,
    CampusIssuesError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from .triage import TriageResult, assign_department, categorize, prioritize, triage

__all__ = [
    "AuthenticationError",
    "CampusIssuesError",
    "Category",
    "Department",
    "ForbiddenError",
    "InternalError",
    "IssueStatus",
    "NotFoundError",
    "Priority",
    "Role",
    "TriageResult",
    "ValidationError",
    "assign_department",
    "categorize",
    "prioritize",
    "triage",
]
