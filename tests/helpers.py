"""Shared fixtures: a fresh schema per test and small builders."""

import unittest
from datetime import UTC, datetime

from userhub.core.database import SessionLocal, engine
from userhub.models import Base, Role
from userhub.schemas.account import AccountCreate
from userhub.services.account_store import AccountStore

DEFAULT_PASSWORD = "s3cret-pass"


def draft(
    name: str = "Test User",
    email: str = "test@example.com",
    password: str = DEFAULT_PASSWORD,
    role: Role = Role.USER,
) -> AccountCreate:
    """Build a minimal AccountCreate for tests."""
    return AccountCreate(name=name, email=email, password=password, role=role)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on round-trip; values are stored as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class DatabaseTestCase(unittest.TestCase):
    """Creates the schema before each test and drops it afterwards."""

    def setUp(self) -> None:
        Base.metadata.create_all(engine)
        self.db = SessionLocal()
        self.store = AccountStore(self.db, inactivity_days=30)

    def tearDown(self) -> None:
        self.db.close()
        Base.metadata.drop_all(engine)
