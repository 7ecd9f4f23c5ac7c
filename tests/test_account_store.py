"""Tests for userhub.services.account_store against an in-memory SQLite database."""

import unittest
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

from sqlalchemy.exc import IntegrityError, OperationalError

from tests.helpers import DEFAULT_PASSWORD, DatabaseTestCase, as_utc, draft
from userhub.core.errors import (
    AccountNotFoundError,
    DuplicateEmailError,
    InvalidInputError,
    StorageError,
)
from userhub.core.security import verify_password
from userhub.models import Account, Role
from userhub.schemas.account import AccountCreate, AccountFilter, AccountUpdate
from userhub.services.account_store import AccountStore


class TestCreate(DatabaseTestCase):
    """create hashes the password and enforces email uniqueness."""

    def test_create_then_find_by_id(self) -> None:
        created = self.store.create(draft(name="Ada", email="ada@example.com", role=Role.ADMIN))
        found = self.store.find_by_id(created.id)
        self.assertIsNotNone(found)
        self.assertEqual(found.name, "Ada")
        self.assertEqual(found.email, "ada@example.com")
        self.assertEqual(found.role, "admin")
        self.assertNotEqual(found.password_hash, DEFAULT_PASSWORD)
        self.assertTrue(verify_password(DEFAULT_PASSWORD, found.password_hash))
        self.assertIsNone(found.last_login)
        self.assertIsNotNone(found.created_at)
        self.assertIsNotNone(found.updated_at)

    def test_role_defaults_to_user(self) -> None:
        created = self.store.create(
            AccountCreate(name="Plain", email="plain@example.com", password=DEFAULT_PASSWORD)
        )
        self.assertEqual(created.role, Role.USER)

    def test_email_is_stored_lowercase(self) -> None:
        created = self.store.create(draft(email="Mixed.Case@Example.COM"))
        self.assertEqual(created.email, "mixed.case@example.com")
        self.assertIsNotNone(self.store.find_by_email("MIXED.case@example.com"))

    def test_duplicate_email_rejected(self) -> None:
        self.store.create(draft(email="dup@example.com"))
        with self.assertRaises(DuplicateEmailError):
            self.store.create(draft(name="Other", email="dup@example.com"))
        self.assertEqual(len(self.store.list()), 1)

    def test_duplicate_email_differing_in_case_rejected(self) -> None:
        self.store.create(draft(email="dup@example.com"))
        with self.assertRaises(DuplicateEmailError):
            self.store.create(draft(email="DUP@example.com"))

    def test_store_usable_after_duplicate(self) -> None:
        self.store.create(draft(email="dup@example.com"))
        with self.assertRaises(DuplicateEmailError):
            self.store.create(draft(email="dup@example.com"))
        other = self.store.create(draft(email="fresh@example.com"))
        self.assertIsNotNone(self.store.find_by_id(other.id))


class TestUpdateAndDelete(DatabaseTestCase):
    """update re-hashes passwords, refreshes updated_at and never creates."""

    def test_update_password_rehashes(self) -> None:
        account = self.store.create(draft())
        updated = self.store.update(account.id, AccountUpdate(password="brand-new-pass"))
        self.assertTrue(verify_password("brand-new-pass", updated.password_hash))
        self.assertFalse(verify_password(DEFAULT_PASSWORD, updated.password_hash))

    def test_update_applies_only_given_fields(self) -> None:
        account = self.store.create(draft(name="Before", email="keep@example.com"))
        old_hash = account.password_hash
        updated = self.store.update(account.id, AccountUpdate(name="After"))
        self.assertEqual(updated.name, "After")
        self.assertEqual(updated.email, "keep@example.com")
        self.assertEqual(updated.password_hash, old_hash)

    def test_update_refreshes_updated_at(self) -> None:
        account = self.store.create(draft())
        before = as_utc(account.updated_at)
        created_at = as_utc(account.created_at)
        updated = self.store.update(account.id, AccountUpdate(name="Renamed"))
        self.assertGreaterEqual(as_utc(updated.updated_at), before)
        self.assertEqual(as_utc(updated.created_at), created_at)

    def test_update_role(self) -> None:
        account = self.store.create(draft())
        updated = self.store.update(account.id, AccountUpdate(role=Role.ADMIN))
        self.assertEqual(updated.role, "admin")

    def test_update_unknown_id_raises_not_found(self) -> None:
        with self.assertRaises(AccountNotFoundError):
            self.store.update("missing", AccountUpdate(name="X"))
        self.assertEqual(self.store.list(), [])

    def test_update_to_taken_email_raises_duplicate(self) -> None:
        self.store.create(draft(email="taken@example.com"))
        other = self.store.create(draft(email="other@example.com"))
        with self.assertRaises(DuplicateEmailError):
            self.store.update(other.id, AccountUpdate(email="taken@example.com"))

    def test_delete(self) -> None:
        account = self.store.create(draft())
        self.store.delete(account.id)
        self.assertIsNone(self.store.find_by_id(account.id))

    def test_delete_unknown_id_raises_not_found(self) -> None:
        with self.assertRaises(AccountNotFoundError):
            self.store.delete("missing")


class TestList(DatabaseTestCase):
    """list filters by role and sorts by a whitelisted field."""

    def setUp(self) -> None:
        super().setUp()
        base = datetime(2026, 1, 1, tzinfo=UTC)
        self.carol = self._create("Carol", "carol@example.com", Role.USER, base)
        self.alice = self._create("Alice", "alice@example.com", Role.ADMIN, base + timedelta(days=1))
        self.bob = self._create("Bob", "bob@example.com", Role.USER, base + timedelta(days=2))

    def _create(self, name: str, email: str, role: Role, created_at: datetime) -> Account:
        account = self.store.create(draft(name=name, email=email, role=role))
        account.created_at = created_at
        self.db.commit()
        return account

    def _names(self, accounts: list[Account]) -> list[str]:
        return [a.name for a in accounts]

    def test_default_order_is_newest_first(self) -> None:
        self.assertEqual(self._names(self.store.list()), ["Bob", "Alice", "Carol"])

    def test_role_filter(self) -> None:
        result = self.store.list(AccountFilter(role=Role.USER))
        self.assertEqual(self._names(result), ["Bob", "Carol"])

    def test_sort_by_defaults_to_ascending(self) -> None:
        result = self.store.list(AccountFilter(sort_by="name"))
        self.assertEqual(self._names(result), ["Alice", "Bob", "Carol"])

    def test_sort_descending(self) -> None:
        result = self.store.list(AccountFilter(sort_by="name", order="DESC"))
        self.assertEqual(self._names(result), ["Carol", "Bob", "Alice"])

    def test_order_is_case_insensitive(self) -> None:
        result = self.store.list(AccountFilter(sort_by="createdAt", order="desc"))
        self.assertEqual(self._names(result), ["Bob", "Alice", "Carol"])

    def test_snake_case_sort_field_accepted(self) -> None:
        result = self.store.list(AccountFilter(sort_by="created_at"))
        self.assertEqual(self._names(result), ["Carol", "Alice", "Bob"])

    def test_unknown_sort_field_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            self.store.list(AccountFilter(sort_by="password_hash"))

    def test_unknown_order_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            self.store.list(AccountFilter(sort_by="name", order="sideways"))


class TestListInactive(DatabaseTestCase):
    """Inactive: never logged in, or last login older than the 30-day cutoff."""

    def setUp(self) -> None:
        super().setUp()
        self.now = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)
        self.never = self.store.create(draft(name="Never", email="never@example.com"))
        self.today = self._with_login("Today", "today@example.com", self.now)
        self.days_31 = self._with_login("Old", "old@example.com", self.now - timedelta(days=31))
        self.days_29 = self._with_login("Recent", "recent@example.com", self.now - timedelta(days=29))
        self.admin_90 = self._with_login(
            "Stale Admin", "admin@example.com", self.now - timedelta(days=90), Role.ADMIN
        )

    def _with_login(self, name: str, email: str, when: datetime, role: Role = Role.USER) -> Account:
        return self.store.create(draft(name=name, email=email, role=role), last_login=when)

    def _ids(self, accounts: list[Account]) -> list[str]:
        return [a.id for a in accounts]

    def test_inactivity_predicate(self) -> None:
        ids = self._ids(self.store.list_inactive(now=self.now))
        self.assertIn(self.never.id, ids)
        self.assertIn(self.days_31.id, ids)
        self.assertIn(self.admin_90.id, ids)
        self.assertNotIn(self.today.id, ids)
        self.assertNotIn(self.days_29.id, ids)

    def test_default_order_never_logged_in_first_then_oldest(self) -> None:
        ids = self._ids(self.store.list_inactive(now=self.now))
        self.assertEqual(ids, [self.never.id, self.admin_90.id, self.days_31.id])

    def test_role_filter_is_anded(self) -> None:
        ids = self._ids(self.store.list_inactive(AccountFilter(role=Role.USER), now=self.now))
        self.assertEqual(ids, [self.never.id, self.days_31.id])
        ids = self._ids(self.store.list_inactive(AccountFilter(role=Role.ADMIN), now=self.now))
        self.assertEqual(ids, [self.admin_90.id])

    def test_sort_override(self) -> None:
        result = self.store.list_inactive(AccountFilter(sort_by="name"), now=self.now)
        self.assertEqual([a.name for a in result], ["Never", "Old", "Stale Admin"])

    def test_cutoff_uses_configured_window(self) -> None:
        store = AccountStore(self.db, inactivity_days=60)
        ids = self._ids(store.list_inactive(now=self.now))
        self.assertEqual(ids, [self.never.id, self.admin_90.id])


class TestRecordLogin(DatabaseTestCase):
    def test_sets_last_login(self) -> None:
        account = self.store.create(draft())
        when = datetime(2026, 3, 3, 9, 30, tzinfo=UTC)
        self.assertTrue(self.store.record_login(account.id, when))
        self.db.expire_all()
        self.assertEqual(as_utc(self.store.get(account.id).last_login), when)

    def test_missing_account_returns_false(self) -> None:
        self.assertFalse(self.store.record_login("missing"))

    def test_has_accounts(self) -> None:
        self.assertFalse(self.store.has_accounts())
        self.store.create(draft())
        self.assertTrue(self.store.has_accounts())


class TestStorageErrors(unittest.TestCase):
    """Driver failures become StorageError with a generic message."""

    def test_query_failure_maps_to_storage_error(self) -> None:
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused at 10.0.0.5"))
        store = AccountStore(db, inactivity_days=30)
        with self.assertRaises(StorageError) as ctx:
            store.find_by_id("x")
        self.assertNotIn("10.0.0.5", ctx.exception.message)
        db.rollback.assert_called_once()


class _PgUniqueViolation(Exception):
    """Stand-in for a psycopg2 unique_violation carrying diag.constraint_name."""

    pgcode = "23505"

    def __init__(self, message: str, constraint_name: str) -> None:
        super().__init__(message)
        self.diag = SimpleNamespace(constraint_name=constraint_name)


class TestPostgresUniqueViolations(unittest.TestCase):
    """On PostgreSQL only the email index name decides DuplicateEmailError."""

    def _store_failing_commit_with(self, orig: Exception) -> tuple[AccountStore, MagicMock]:
        db = MagicMock()
        db.commit.side_effect = IntegrityError("INSERT INTO accounts ...", {}, orig)
        return AccountStore(db, inactivity_days=30), db

    def test_email_index_violation_is_duplicate_email(self) -> None:
        store, db = self._store_failing_commit_with(
            _PgUniqueViolation('duplicate key value violates unique constraint "ix_accounts_email"', "ix_accounts_email")
        )
        with self.assertRaises(DuplicateEmailError):
            store.create(draft())
        db.rollback.assert_called_once()

    def test_other_unique_violation_mentioning_email_is_storage_error(self) -> None:
        store, _ = self._store_failing_commit_with(
            _PgUniqueViolation(
                'duplicate key value violates unique constraint "uq_email_outbox_id"',
                "uq_email_outbox_id",
            )
        )
        with self.assertRaises(StorageError):
            store.create(draft())


if __name__ == "__main__":
    unittest.main()
