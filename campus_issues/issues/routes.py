"""
Issue API Routes.

All endpoints are prefixed with /issues and require a principal.
Responses use the {success, data, message} envelope.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_current_principal
from ..db.base import get_db
from .schemas import CommentCreate, IssueCreate, IssueFilters, IssueUpdate, Principal
from .services import IssueService

router = APIRouter(prefix="/issues", tags=["issues"])


def _envelope(data: Dict[str, Any], message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body["data"] = data
    return body


@router.post("", status_code=201)
async def create_issue(
    issue: IssueCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Report a new issue. Category, priority and department are assigned automatically."""
    db_issue = IssueService(db).create(principal, issue)
    return _envelope({"issue": db_issue.to_dict()}, "Issue reported successfully")


@router.get("")
async def list_issues(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    department: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """List visible issues with optional filtering and pagination."""
    filters = IssueFilters(
        status=status,
        priority=priority,
        category=category,
        department=department,
        search=search,
    )
    issues, pagination = IssueService(db).list(
        principal, filters, page=page, limit=limit
    )
    return _envelope(
        {
            "issues": [i.to_dict() for i in issues],
            "pagination": pagination.model_dump(),
        }
    )


@router.get("/my-issues")
async def list_my_issues(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """List the issues reported by the requesting user."""
    issues = IssueService(db).list_for_reporter(principal)
    return _envelope({"issues": [i.to_dict() for i in issues]})


@router.get("/stats")
async def get_dashboard_stats(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Dashboard counts for the requesting user's scope."""
    stats = IssueService(db).stats(principal)
    return _envelope(stats.model_dump(mode="json", by_alias=True))


@router.get("/{issue_id}")
async def get_issue(
    issue_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Get an Issue by ID."""
    issue = IssueService(db).get(principal, issue_id)
    return _envelope({"issue": issue.to_dict()})


@router.put("/{issue_id}")
async def update_issue(
    issue_id: str,
    changes: IssueUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Update status, priority, department or resolution notes."""
    issue = IssueService(db).update(principal, issue_id, changes)
    return _envelope({"issue": issue.to_dict()}, "Issue updated successfully")


@router.post("/{issue_id}/comments")
async def add_comment(
    issue_id: str,
    comment: CommentCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Append a comment to an Issue."""
    issue = IssueService(db).add_comment(principal, issue_id, comment.text)
    return _envelope({"issue": issue.to_dict()}, "Comment added successfully")
