"""SQLAlchemy ORM models."""

from userhub.models.account import Account, Role
from userhub.models.base import Base

__all__ = ["Account", "Base", "Role"]
