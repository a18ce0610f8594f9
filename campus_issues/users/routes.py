"""
User API routes.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_principal
from ..db.base import get_db
from ..errors import NotFoundError
from ..issues.schemas import Principal
from .services import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me")
async def get_me(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Return the requesting user's profile."""
    user = UserService(db).get(principal.id)
    if user is None:
        raise NotFoundError("User not found")
    return {"success": True, "data": {"user": user.to_dict()}}
