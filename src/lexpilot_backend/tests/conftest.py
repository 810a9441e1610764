"""
Pytest configuration and fixtures for all tests.

Each test gets a fresh in-memory SQLite database with foreign keys enabled.
"""

import pytest
from typing import Optional
from uuid import uuid4
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lexpilot_backend.interface.roles import RoleCreate
from lexpilot_backend.model import Base
from lexpilot_backend.model.auth import User
from lexpilot_backend.model.role import Role
from lexpilot_backend.permissions.routes import DEFAULT_ROUTE_TABLE
from lexpilot_backend.repositories.role import RoleRepository
from lexpilot_backend.repositories.user import UserRepository


@pytest.fixture
def engine():
    """Create an isolated in-memory database engine."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def Session(engine):
    """Create session factory."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(Session):
    """Create a new database session for a test."""
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make_user(email: Optional[str] = None, role: Optional[str] = None, name: str = "Test User") -> User:
        return UserRepository(db).create_user(
            email=email or f"{uuid4().hex[:8]}@example.com",
            name=name,
            role=role,
        )
    return _make_user


@pytest.fixture
def make_role(db):
    def _make_role(name: str, permissions: Optional[dict] = None, is_active: bool = True) -> Role:
        return RoleRepository(db).create_role(
            RoleCreate(name=name, permissions=permissions or {}, is_active=is_active)
        )
    return _make_role


@pytest.fixture
def route_table():
    return DEFAULT_ROUTE_TABLE
