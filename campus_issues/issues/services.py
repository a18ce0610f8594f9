"""
Issue lifecycle service.

Creates, lists, reads and updates issues and appends comments, enforcing the
access rules in ``access`` and the first-resolution-wins invariant.

Audit logging is integrated into all state-changing operations.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

import structlog
from sqlalchemy import case, desc, func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..config import get_settings
from ..db.audit_service import AuditService
from ..db.models import IssueCommentModel, IssueModel
from ..enums import IssueStatus, PRIORITY_RANK
from ..errors import InternalError, NotFoundError, ValidationError
from ..ids import generate_ulid, utc_now
from ..triage import triage
from .access import (
    allowed_update_fields,
    ensure_can_update,
    ensure_can_view,
    scope_filter,
)
from .schemas import (
    DashboardStats,
    DepartmentStats,
    IssueCreate,
    IssueFilters,
    IssueUpdate,
    Pagination,
    Principal,
)

logger = structlog.get_logger()

DEFAULT_RESOLUTION_NOTES = "Issue resolved"

_priority_rank = case(
    {priority.value: rank for priority, rank in PRIORITY_RANK.items()},
    value=IssueModel.priority,
    else_=0,
)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class IssueService:
    """Service for managing Issue records on behalf of a principal."""

    def __init__(self, db: Session, audit: Optional[AuditService] = None):
        self.db = db
        self.audit = audit or AuditService(db)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("issue_store_failed", operation=operation)
            raise InternalError(f"Error {operation}", error=str(e)) from e

    def _get_or_404(self, issue_id: str) -> IssueModel:
        issue = self.db.query(IssueModel).filter(IssueModel.id == issue_id).first()
        if issue is None:
            raise NotFoundError("Issue not found")
        return issue

    def _scoped_query(self, principal: Principal) -> Query:
        return self.db.query(IssueModel).filter(*scope_filter(principal).criteria())

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, principal: Principal, issue: IssueCreate) -> IssueModel:
        """Submit a new report. Category, priority and department are derived."""
        building = issue.location.building if issue.location else ""
        if not issue.title or not issue.description or not building:
            raise ValidationError(
                "Title, description, and building location are required"
            )

        result = triage(issue.title, issue.description)
        now = utc_now()

        db_issue = IssueModel(
            id=generate_ulid(),
            title=issue.title,
            description=issue.description,
            category=result.category.value,
            priority=result.priority.value,
            status=IssueStatus.PENDING.value,
            location_building=building,
            location_room=issue.location.room or None,
            location_floor=issue.location.floor or None,
            reported_by_id=principal.id,
            assigned_department=result.department.value,
            created_at=now,
            updated_at=now,
        )
        self.db.add(db_issue)
        self.audit.log_create(
            entity_kind="Issue",
            entity_id=db_issue.id,
            after={**db_issue.snapshot(), "category": db_issue.category},
            actor_role=principal.role.value,
            actor_id=principal.id,
        )
        self._commit("creating issue")
        self.db.refresh(db_issue)

        logger.info(
            "issue_created",
            issue_id=db_issue.id,
            category=db_issue.category,
            priority=db_issue.priority,
            department=db_issue.assigned_department,
            reported_by=principal.id,
        )
        return db_issue

    def list(
        self,
        principal: Principal,
        filters: Optional[IssueFilters] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Tuple[List[IssueModel], Pagination]:
        """List visible issues, newest first, one page at a time."""
        settings = get_settings()
        filters = filters or IssueFilters()
        if limit is None:
            limit = settings.default_page_size
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive integers")
        limit = min(limit, settings.max_page_size)

        # Scope first; user filters can only narrow it
        query = self._scoped_query(principal)

        if filters.status:
            query = query.filter(IssueModel.status == filters.status.value)
        if filters.priority:
            query = query.filter(IssueModel.priority == filters.priority.value)
        if filters.category:
            query = query.filter(IssueModel.category == filters.category.value)
        if filters.department:
            query = query.filter(
                IssueModel.assigned_department == filters.department.value
            )
        if filters.search:
            pattern = _like_pattern(filters.search)
            query = query.filter(
                or_(
                    IssueModel.title.ilike(pattern, escape="\\"),
                    IssueModel.description.ilike(pattern, escape="\\"),
                    IssueModel.location_building.ilike(pattern, escape="\\"),
                )
            )

        total = query.order_by(None).count()
        issues = (
            query.order_by(desc(IssueModel.created_at), desc(_priority_rank))
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return issues, Pagination(
            current=page, pages=math.ceil(total / limit), total=total
        )

    def list_for_reporter(self, principal: Principal) -> List[IssueModel]:
        """Every issue the principal reported, newest first."""
        return (
            self.db.query(IssueModel)
            .filter(IssueModel.reported_by_id == principal.id)
            .order_by(desc(IssueModel.created_at))
            .all()
        )

    def get(self, principal: Principal, issue_id: str) -> IssueModel:
        issue = self._get_or_404(issue_id)
        ensure_can_view(principal, issue)
        return issue

    def update(
        self, principal: Principal, issue_id: str, changes: IssueUpdate
    ) -> IssueModel:
        """Apply the fields this principal may change.

        Status may be set to any value. The first transition into ``resolved``
        records who resolved it and when; later ones leave that untouched.
        """
        issue = self._get_or_404(issue_id)
        ensure_can_update(principal, issue)

        allowed = allowed_update_fields(principal, changes)
        before = issue.snapshot()
        old_status = issue.status
        now = utc_now()

        new_status = allowed.get("status")
        if new_status is not None:
            issue.status = new_status.value
        if "priority" in allowed:
            issue.priority = allowed["priority"].value
        if "assigned_department" in allowed:
            issue.assigned_department = allowed["assigned_department"].value
        issue.updated_at = now

        resolved_now = False
        if new_status == IssueStatus.RESOLVED:
            # Conditional write: only the first resolution sets these fields
            result = self.db.execute(
                update(IssueModel)
                .where(IssueModel.id == issue.id, IssueModel.resolved_at.is_(None))
                .values(
                    resolved_by_id=principal.id,
                    resolved_at=now,
                    resolution_notes=allowed.get("resolution_notes")
                    or DEFAULT_RESOLUTION_NOTES,
                )
                .execution_options(synchronize_session=False)
            )
            resolved_now = result.rowcount == 1

        after = {**issue.snapshot(), "resolvedAt": before["resolvedAt"]}
        if resolved_now:
            after["resolvedAt"] = now.isoformat()
        if after != before:
            self.audit.log_update(
                entity_kind="Issue",
                entity_id=issue.id,
                before=before,
                after=after,
                actor_role=principal.role.value,
                actor_id=principal.id,
            )
        if new_status is not None and new_status.value != old_status:
            self.audit.log_status_change(
                entity_kind="Issue",
                entity_id=issue.id,
                old_status=old_status,
                new_status=new_status.value,
                actor_role=principal.role.value,
                actor_id=principal.id,
            )

        self._commit("updating issue")
        self.db.refresh(issue)

        logger.info(
            "issue_updated",
            issue_id=issue.id,
            fields=sorted(allowed),
            principal_id=principal.id,
        )
        if resolved_now:
            logger.info("issue_resolved", issue_id=issue.id, resolved_by=principal.id)
        return issue

    def add_comment(self, principal: Principal, issue_id: str, text: str) -> IssueModel:
        """Append a comment to an issue the principal can see."""
        text = (text or "").strip()
        if not text:
            raise ValidationError("Comment text is required")

        issue = self._get_or_404(issue_id)
        ensure_can_view(principal, issue, action="comment on")

        now = utc_now()
        comment = IssueCommentModel(
            id=generate_ulid(),
            issue_id=issue.id,
            user_id=principal.id,
            text=text,
            created_at=now,
        )
        self.db.add(comment)
        issue.updated_at = now
        self.audit.log_comment(
            entity_kind="Issue",
            entity_id=issue.id,
            comment={"commentId": comment.id, "text": text},
            actor_role=principal.role.value,
            actor_id=principal.id,
        )
        self._commit("adding comment")
        self.db.refresh(issue)

        logger.info("comment_added", issue_id=issue.id, principal_id=principal.id)
        return issue

    def stats(self, principal: Principal) -> DashboardStats:
        """Dashboard counts within the principal's scope.

        Admins also get a per-department breakdown.
        """
        counts = dict(
            self.db.query(IssueModel.status, func.count(IssueModel.id))
            .filter(*scope_filter(principal).criteria())
            .group_by(IssueModel.status)
            .all()
        )

        stats = DashboardStats(
            total_issues=sum(counts.values()),
            pending_issues=counts.get(IssueStatus.PENDING.value, 0),
            in_progress_issues=counts.get(IssueStatus.IN_PROGRESS.value, 0),
            resolved_issues=counts.get(IssueStatus.RESOLVED.value, 0),
        )

        if principal.is_admin:
            stats.department_stats = self._department_breakdown()

        return stats

    def _department_breakdown(self) -> List[DepartmentStats]:
        def status_count(status: IssueStatus):
            return func.sum(case((IssueModel.status == status.value, 1), else_=0))

        rows = (
            self.db.query(
                IssueModel.assigned_department,
                func.count(IssueModel.id),
                status_count(IssueStatus.PENDING),
                status_count(IssueStatus.IN_PROGRESS),
                status_count(IssueStatus.RESOLVED),
            )
            .group_by(IssueModel.assigned_department)
            .order_by(IssueModel.assigned_department)
            .all()
        )

        return [
            DepartmentStats(
                department=department,
                total=total,
                pending=pending or 0,
                in_progress=in_progress or 0,
                resolved=resolved or 0,
            )
            for department, total, pending, in_progress, resolved in rows
        ]
