"""
User directory service.

Holds the user references issues point at. Users are looked up to resolve the
request principal and to display reporters, commenters and resolvers.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.models import UserModel
from ..errors import ValidationError
from ..ids import generate_ulid, utc_now
from .schemas import UserCreate


class UserService:
    """Service for managing users."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user: UserCreate) -> UserModel:
        """Create a new user. Emails are unique, compared lowercase."""
        email = user.email.lower()
        if self.get_by_email(email):
            raise ValidationError(f"User with email '{email}' already exists")

        db_user = UserModel(
            id=generate_ulid(),
            name=user.name,
            email=email,
            role=user.role.value,
            department=user.department.value if user.department else None,
            created_at=utc_now(),
        )
        self.db.add(db_user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationError(f"User with email '{email}' already exists") from e
        self.db.refresh(db_user)
        return db_user

    def get(self, user_id: str) -> Optional[UserModel]:
        """Get a user by ID."""
        return self.db.query(UserModel).filter(UserModel.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[UserModel]:
        return (
            self.db.query(UserModel)
            .filter(UserModel.email == email.strip().lower())
            .first()
        )
