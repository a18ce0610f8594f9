"""Test configuration and fixtures.

Every test gets a fresh in-memory SQLite database. API tests talk to the
FastAPI app with the ``get_db`` dependency pointed at that database.
"""

from typing import Callable, Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from campus_issues.api import app
from campus_issues.auth import principal_from_user
from campus_issues.db import Base, UserModel, get_db
from campus_issues.db.base import build_engine
from campus_issues.enums import Department, Role
from campus_issues.issues.schemas import Principal
from campus_issues.users import UserCreate, UserService


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory) -> Generator[TestClient, None, None]:
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


_counter = 0


def _next() -> int:
    global _counter
    _counter += 1
    return _counter


@pytest.fixture
def make_user(db_session) -> Callable[..., UserModel]:
    """Factory creating users with unique emails."""

    def _make(
        role: Role = Role.STUDENT,
        department: Optional[Department] = None,
        name: Optional[str] = None,
    ) -> UserModel:
        n = _next()
        return UserService(db_session).create(
            UserCreate(
                name=name or f"{role.value.title()} {n}",
                email=f"{role.value}{n}@campus.edu",
                role=role,
                department=department,
            )
        )

    return _make


@pytest.fixture
def student(make_user) -> Principal:
    return principal_from_user(make_user(Role.STUDENT))


@pytest.fixture
def other_student(make_user) -> Principal:
    return principal_from_user(make_user(Role.STUDENT))


@pytest.fixture
def it_staff(make_user) -> Principal:
    return principal_from_user(make_user(Role.STAFF, Department.IT))


@pytest.fixture
def maintenance_staff(make_user) -> Principal:
    return principal_from_user(make_user(Role.STAFF, Department.MAINTENANCE))


@pytest.fixture
def admin(make_user) -> Principal:
    return principal_from_user(make_user(Role.ADMIN))
