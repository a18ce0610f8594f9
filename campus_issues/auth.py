"""
Principal resolution.

Authentication happens upstream. Requests arrive carrying the id of an
already-authenticated user in a header; this module turns that id into the
Principal the issue service works with.
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .config import get_settings
from .db.base import get_db
from .db.models import UserModel
from .enums import Department, Role
from .errors import AuthenticationError
from .issues.schemas import Principal
from .users.services import UserService


def principal_from_user(user: UserModel) -> Principal:
    return Principal(
        id=user.id,
        role=Role(user.role),
        department=Department(user.department) if user.department else None,
    )


def get_current_principal(
    request: Request,
    db: Session = Depends(get_db),
) -> Principal:
    """FastAPI dependency returning the requesting principal."""
    header = get_settings().principal_header
    user_id: Optional[str] = request.headers.get(header)
    if not user_id or not user_id.strip():
        raise AuthenticationError(f"Missing {header} header")

    user = UserService(db).get(user_id.strip())
    if user is None:
        raise AuthenticationError("Unknown user")

    return principal_from_user(user)
