"""
User directory.
"""

from .schemas import UserCreate
from .services import UserService

__all__ = ["UserCreate", "UserService"]
