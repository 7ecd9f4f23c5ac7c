"""First-boot seeding: create an admin (and optionally a stale sample user) in an empty store."""

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from userhub.models import Role
from userhub.models.base import utcnow
from userhub.schemas.account import AccountCreate
from userhub.services.account_store import AccountStore

if TYPE_CHECKING:
    from userhub.core.config import Settings

logger = logging.getLogger(__name__)

SAMPLE_USER_NAME = "Sample User"
SAMPLE_USER_EMAIL = "user@example.com"
# Old enough to show up in the inactivity report with the default 30-day window.
SAMPLE_USER_LAST_LOGIN_DAYS = 61


def seed_initial_accounts(store: AccountStore, settings: "Settings") -> bool:
    """
    Create the initial admin when the store is empty. Returns True if anything was created.

    Idempotent: a non-empty store is left untouched. Skipped when
    SEED_ADMIN_PASSWORD is not configured.
    """
    if store.has_accounts():
        logger.info("Accounts present; skipping seed.")
        return False
    if settings.SEED_ADMIN_PASSWORD is None:
        logger.warning("SEED_ADMIN_PASSWORD is not set; skipping seed.")
        return False

    password = settings.SEED_ADMIN_PASSWORD.get_secret_value()
    now = utcnow()
    store.create(
        AccountCreate(
            name=settings.SEED_ADMIN_NAME,
            email=settings.SEED_ADMIN_EMAIL,
            password=password,
            role=Role.ADMIN,
        ),
        last_login=now,
    )
    logger.info("Seeded admin account", extra={"email": settings.SEED_ADMIN_EMAIL})

    if settings.SEED_SAMPLE_USER:
        store.create(
            AccountCreate(
                name=SAMPLE_USER_NAME,
                email=SAMPLE_USER_EMAIL,
                password=password,
                role=Role.USER,
            ),
            last_login=now - timedelta(days=SAMPLE_USER_LAST_LOGIN_DAYS),
        )
        logger.info("Seeded sample user", extra={"email": SAMPLE_USER_EMAIL})
    return True
