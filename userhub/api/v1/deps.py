"""Per-request wiring: store, services and audit recorder built from the injected DB session."""

from typing import Annotated

from fastapi import Depends, Query
from sqlalchemy.orm import Session, sessionmaker

from userhub.core.config import settings
from userhub.core.database import get_db, get_session_factory
from userhub.models import Role
from userhub.schemas.account import AccountFilter
from userhub.services.account_store import AccountStore
from userhub.services.audit import AuditRecorder
from userhub.services.auth import AuthService


def get_account_store(db: Annotated[Session, Depends(get_db)]) -> AccountStore:
    return AccountStore(db, inactivity_days=settings.INACTIVITY_DAYS)


def get_auth_service(
    store: Annotated[AccountStore, Depends(get_account_store)],
    session_factory: Annotated[sessionmaker, Depends(get_session_factory)],
) -> AuthService:
    return AuthService(store, session_factory=session_factory)


def get_audit_recorder() -> AuditRecorder:
    return AuditRecorder(settings.AUDIT_LOG_PATH)


def get_account_filter(
    role: Annotated[Role | None, Query(description="Restrict to one role")] = None,
    sort_by: Annotated[
        str | None,
        Query(alias="sortBy", description="name, email, role, lastLogin, createdAt or updatedAt"),
    ] = None,
    order: Annotated[str | None, Query(description="ASC or DESC")] = None,
) -> AccountFilter:
    """Collect list query parameters; sort field and order are validated by the store."""
    return AccountFilter(role=role, sort_by=sort_by, order=order)
