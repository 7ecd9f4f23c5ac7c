"""ORM model for user accounts (auth, RBAC and inactivity reporting)."""

import enum
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, String

from userhub.models.base import Base, TimestampMixin


class Role(str, enum.Enum):
    """Authorization tier."""

    ADMIN = "admin"
    USER = "user"


def _new_account_id() -> str:
    return str(uuid.uuid4())


class Account(TimestampMixin, Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'admin' or 'user'. last_login is NULL until the first successful login.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user')", name="ck_accounts_role"),
    )

    id = Column(String(36), primary_key=True, default=_new_account_id)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.USER.value)
    last_login = Column(DateTime(timezone=True), nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<Account id={self.id!r} email={self.email!r} role={self.role!r}>"
