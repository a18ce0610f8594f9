"""
Database package for Campus Issues.
"""

from .audit_models import AuditLogModel
from .base import Base, get_db, get_engine, get_session_local, init_database
from .models import IssueCommentModel, IssueModel, UserModel

__all__ = [
    "AuditLogModel",
    "Base",
    "IssueCommentModel",
    "IssueModel",
    "UserModel",
    "get_db",
    "get_engine",
    "get_session_local",
    "init_database",
]
