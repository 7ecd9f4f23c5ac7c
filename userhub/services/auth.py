"""Session issuer: registration, credential checks and JWT minting."""

import logging
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from userhub.core.errors import InvalidCredentialsError, StorageError
from userhub.core.security import create_access_token, hash_password, verify_password
from userhub.models import Account
from userhub.models.base import utcnow
from userhub.schemas.account import AccountCreate
from userhub.services.account_store import AccountStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    """Hash verified against when the email is unknown, so both failure paths cost one bcrypt check."""
    return hash_password("userhub-timing-equalizer")


@dataclass
class LoginResult:
    access_token: str
    account: Account


class AuthService:
    """
    Validates credentials against the account store and issues session tokens.

    session_factory is used by record_login, which runs after the request's
    own session may already be closed.
    """

    def __init__(
        self,
        store: AccountStore,
        session_factory: sessionmaker | None = None,
    ) -> None:
        self.store = store
        self.session_factory = session_factory

    def register(self, draft: AccountCreate) -> Account:
        """Create an account from a public registration. Raises DuplicateEmailError."""
        return self.store.create(draft)

    def login(self, email: str, password: str) -> LoginResult:
        """
        Return a signed token for valid credentials.

        Unknown email and wrong password both raise InvalidCredentialsError
        with the same message; only the internal log records which one it was.
        """
        account = self.store.find_by_email(email)
        if account is None:
            verify_password(password, _dummy_hash())
            logger.info("Login failed", extra={"reason": "unknown_email"})
            raise InvalidCredentialsError()
        if not verify_password(password, account.password_hash):
            logger.info(
                "Login failed",
                extra={"reason": "bad_password", "account_id": account.id},
            )
            raise InvalidCredentialsError()

        token = create_access_token(sub=account.id, email=account.email, role=account.role)
        logger.info("Login succeeded", extra={"account_id": account.id})
        return LoginResult(access_token=token, account=account)

    def record_login(self, account_id: str, when: datetime | None = None) -> None:
        """Persist last_login for account_id. Failures are logged, never raised."""
        when = when or utcnow()
        db: Session | None = None
        try:
            if self.session_factory is not None:
                db = self.session_factory()
                store = AccountStore(db)
            else:
                store = self.store
            if not store.record_login(account_id, when):
                logger.warning(
                    "last_login not recorded; account missing",
                    extra={"account_id": account_id},
                )
        except (StorageError, SQLAlchemyError):
            logger.exception(
                "Failed to record last_login", extra={"account_id": account_id}
            )
        finally:
            if db is not None:
                db.close()
