"""User schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, constr, model_validator

from ..enums import Department, Role


class UserCreate(BaseModel):
    """Schema for registering a user in the directory."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: constr(min_length=1, max_length=120)
    email: constr(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Role = Role.STUDENT
    department: Optional[Department] = None

    @model_validator(mode="after")
    def _staff_need_department(self) -> "UserCreate":
        if self.role == Role.STAFF and self.department is None:
            raise ValueError("staff users must belong to a department")
        return self
