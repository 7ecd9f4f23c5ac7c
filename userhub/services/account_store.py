"""Account store: CRUD plus list and inactivity queries over the accounts table."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from userhub.core.config import settings
from userhub.core.errors import (
    AccountNotFoundError,
    DuplicateEmailError,
    InvalidInputError,
    StorageError,
)
from userhub.core.security import hash_password
from userhub.models import Account, Role
from userhub.models.base import utcnow
from userhub.schemas.account import AccountCreate, AccountFilter, AccountUpdate

logger = logging.getLogger(__name__)

# API sort names (camelCase as sent by clients, snake_case also accepted) -> column.
SORTABLE_FIELDS = {
    "name": Account.name,
    "email": Account.email,
    "role": Account.role,
    "lastLogin": Account.last_login,
    "last_login": Account.last_login,
    "createdAt": Account.created_at,
    "created_at": Account.created_at,
    "updatedAt": Account.updated_at,
    "updated_at": Account.updated_at,
}

SORT_ORDERS = ("ASC", "DESC")

# PostgreSQL SQLSTATE for unique_violation, and the unique index guarding accounts.email.
PG_UNIQUE_VIOLATION = "23505"
EMAIL_UNIQUE_INDEX = "ix_accounts_email"


def _is_duplicate_email(exc: IntegrityError) -> bool:
    """True if the IntegrityError comes from the unique index on accounts.email."""
    orig = exc.orig
    if getattr(orig, "pgcode", None) == PG_UNIQUE_VIOLATION:
        diag = getattr(orig, "diag", None)
        return getattr(diag, "constraint_name", None) == EMAIL_UNIQUE_INDEX
    # SQLite reports the column, not the index: "UNIQUE constraint failed: accounts.email"
    text = str(orig).lower()
    return "unique constraint failed" in text and "accounts.email" in text


def _parse_order(order: str | None) -> str:
    if order is None or not order.strip():
        return "ASC"
    normalized = order.strip().upper()
    if normalized not in SORT_ORDERS:
        raise InvalidInputError(f"order must be one of {list(SORT_ORDERS)}, got {order!r}")
    return normalized


def _order_clauses(account_filter: AccountFilter, default: list) -> list:
    """Build ORDER BY clauses from the filter; default applies when no sort field is given."""
    direction = _parse_order(account_filter.order)
    if account_filter.sort_by is None or not account_filter.sort_by.strip():
        return default
    column = SORTABLE_FIELDS.get(account_filter.sort_by.strip())
    if column is None:
        allowed = sorted(k for k in SORTABLE_FIELDS if "_" not in k)
        raise InvalidInputError(
            f"Unsupported sortBy field {account_filter.sort_by!r}; expected one of {allowed}"
        )
    clause = column.asc() if direction == "ASC" else column.desc()
    if column is Account.last_login:
        # Never-logged-in accounts count as the most stale.
        clause = clause.nulls_first() if direction == "ASC" else clause.nulls_last()
    return [clause, Account.id.asc()]


class AccountStore:
    """
    Owns the account collection for one unit of work (one SQLAlchemy session).

    Plain-text passwords are hashed here and never reach the database.
    Storage failures surface as StorageError; the email unique constraint
    surfaces as DuplicateEmailError.
    """

    def __init__(self, db: Session, inactivity_days: int | None = None) -> None:
        self.db = db
        self.inactivity_days = inactivity_days or settings.INACTIVITY_DAYS

    @contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            if _is_duplicate_email(e):
                logger.info("Duplicate email rejected", extra={"operation": operation})
                raise DuplicateEmailError() from e
            logger.exception("Integrity error during account %s", operation)
            raise StorageError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Storage error during account %s", operation)
            raise StorageError() from e

    def create(self, draft: AccountCreate, last_login: datetime | None = None) -> Account:
        """Insert a new account. Raises DuplicateEmailError if the email is taken."""
        account = Account(
            name=draft.name,
            email=draft.email.lower(),
            password_hash=hash_password(draft.password),
            role=Role(draft.role).value,
            last_login=last_login,
        )
        with self._storage_errors("create"):
            self.db.add(account)
            self.db.commit()
            self.db.refresh(account)
        logger.info("Account created", extra={"account_id": account.id, "role": account.role})
        return account

    def find_by_id(self, account_id: str) -> Account | None:
        with self._storage_errors("lookup"):
            return self.db.query(Account).filter(Account.id == account_id).first()

    def find_by_email(self, email: str) -> Account | None:
        with self._storage_errors("lookup"):
            return (
                self.db.query(Account)
                .filter(Account.email == email.strip().lower())
                .first()
            )

    def get(self, account_id: str) -> Account:
        """Like find_by_id but raises AccountNotFoundError when absent."""
        account = self.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError()
        return account

    def update(self, account_id: str, patch: AccountUpdate) -> Account:
        """
        Apply a partial update. A patched password is re-hashed; updated_at is refreshed.

        Raises AccountNotFoundError for unknown ids (no implicit create) and
        DuplicateEmailError when the new email belongs to another account.
        """
        account = self.get(account_id)
        changes = patch.changes()
        if "password" in changes:
            account.password_hash = hash_password(changes.pop("password"))
        if "email" in changes:
            account.email = changes.pop("email").lower()
        if "role" in changes:
            account.role = Role(changes.pop("role")).value
        for field, value in changes.items():
            setattr(account, field, value)
        account.updated_at = utcnow()
        with self._storage_errors("update"):
            self.db.commit()
            self.db.refresh(account)
        return account

    def delete(self, account_id: str) -> None:
        """Hard delete; raises AccountNotFoundError for unknown ids."""
        account = self.get(account_id)
        with self._storage_errors("delete"):
            self.db.delete(account)
            self.db.commit()
        logger.info("Account deleted", extra={"account_id": account_id})

    def _filtered(self, account_filter: AccountFilter) -> Query:
        query = self.db.query(Account)
        if account_filter.role is not None:
            query = query.filter(Account.role == Role(account_filter.role).value)
        return query

    def list(self, account_filter: AccountFilter | None = None) -> list[Account]:
        """Accounts matching the role filter; newest first unless a sort field is given."""
        account_filter = account_filter or AccountFilter()
        order_by = _order_clauses(
            account_filter, default=[Account.created_at.desc(), Account.id.asc()]
        )
        with self._storage_errors("list"):
            return self._filtered(account_filter).order_by(*order_by).all()

    def inactivity_cutoff(self, now: datetime | None = None) -> datetime:
        return (now or utcnow()) - timedelta(days=self.inactivity_days)

    def list_inactive(
        self,
        account_filter: AccountFilter | None = None,
        now: datetime | None = None,
    ) -> list[Account]:
        """
        Accounts that never logged in or whose last login predates the cutoff,
        AND-ed with the optional role filter.

        Default ordering: last_login ascending with never-logged-in accounts first.
        """
        account_filter = account_filter or AccountFilter()
        cutoff = self.inactivity_cutoff(now)
        order_by = _order_clauses(
            account_filter,
            default=[Account.last_login.asc().nulls_first(), Account.id.asc()],
        )
        with self._storage_errors("list_inactive"):
            return (
                self._filtered(account_filter)
                .filter(or_(Account.last_login.is_(None), Account.last_login < cutoff))
                .order_by(*order_by)
                .all()
            )

    def record_login(self, account_id: str, when: datetime | None = None) -> bool:
        """Set last_login; returns False if the account no longer exists."""
        account = self.find_by_id(account_id)
        if account is None:
            return False
        account.last_login = when or utcnow()
        with self._storage_errors("record_login"):
            self.db.commit()
        return True

    def has_accounts(self) -> bool:
        with self._storage_errors("lookup"):
            return self.db.query(Account.id).first() is not None
