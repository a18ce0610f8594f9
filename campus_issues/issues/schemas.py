"""
Request and response schemas for the issues API.

One explicit schema per operation. Wire names are camelCase; snake_case field
names are accepted too.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator

from ..enums import Category, Department, IssueStatus, Priority, Role

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
COMMENT_MAX_LENGTH = 300
RESOLUTION_NOTES_MAX_LENGTH = 500


class Principal(BaseModel):
    """The authenticated actor performing a request."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    department: Optional[Department] = None

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    @property
    def is_staff(self) -> bool:
        return self.role == Role.STAFF

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Location(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    # Required-ness of building is checked by the service
    building: constr(max_length=120) = ""
    room: Optional[constr(max_length=60)] = None
    floor: Optional[constr(max_length=30)] = None


class IssueCreate(BaseModel):
    """Body of a new report.

    Category, priority and department are never accepted from the client;
    they are derived from the text.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: constr(max_length=TITLE_MAX_LENGTH) = ""
    description: constr(max_length=DESCRIPTION_MAX_LENGTH) = ""
    location: Optional[Location] = None


class IssueUpdate(BaseModel):
    """Fields a principal may ask to change.

    Which of them are applied depends on the principal's role.
    """

    model_config = ConfigDict(
        extra="forbid", populate_by_name=True, str_strip_whitespace=True
    )

    status: Optional[IssueStatus] = None
    priority: Optional[Priority] = None
    assigned_department: Optional[Department] = Field(
        None, alias="assignedDepartment"
    )
    resolution_notes: Optional[constr(max_length=RESOLUTION_NOTES_MAX_LENGTH)] = Field(
        None, alias="resolutionNotes"
    )


class CommentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Emptiness is checked by the service so the message matches other paths
    text: constr(max_length=COMMENT_MAX_LENGTH) = ""


class IssueFilters(BaseModel):
    """Optional listing filters. ``"all"`` or an empty value means unset."""

    status: Optional[IssueStatus] = None
    priority: Optional[Priority] = None
    category: Optional[Category] = None
    department: Optional[Department] = None
    search: Optional[str] = None

    @field_validator("status", "priority", "category", "department", mode="before")
    @classmethod
    def _all_means_unset(cls, value):
        if value is None:
            return None
        if isinstance(value, str) and value.strip().lower() in ("", "all"):
            return None
        return value

    @field_validator("search", mode="before")
    @classmethod
    def _blank_search_is_unset(cls, value):
        if isinstance(value, str):
            value = value.strip()
        return value or None


class Pagination(BaseModel):
    current: int
    pages: int
    total: int


class DepartmentStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    department: Optional[Department] = None
    total: int = 0
    pending: int = 0
    in_progress: int = Field(0, alias="inProgress")
    resolved: int = 0


class DashboardStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_issues: int = Field(0, alias="totalIssues")
    pending_issues: int = Field(0, alias="pendingIssues")
    in_progress_issues: int = Field(0, alias="inProgressIssues")
    resolved_issues: int = Field(0, alias="resolvedIssues")
    department_stats: List[DepartmentStats] = Field(
        default_factory=list, alias="departmentStats"
    )
