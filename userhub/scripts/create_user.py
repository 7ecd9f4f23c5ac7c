"""
Create an account (e.g. the first admin) or seed an empty database. Run from project root:
  python -m userhub.scripts.create_user NAME EMAIL PASSWORD [role]
  python -m userhub.scripts.create_user --seed
Example:
  python -m userhub.scripts.create_user "Ops Admin" ops@example.com 'your-secure-password' admin
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from userhub.core.config import get_settings
from userhub.core.database import SessionLocal
from userhub.core.errors import ServiceError
from userhub.core.logging_config import configure_logging
from userhub.models import Role
from userhub.schemas.account import AccountCreate
from userhub.services.account_store import AccountStore
from userhub.services.seed import seed_initial_accounts

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a Userhub account from the command line.")
    parser.add_argument("--seed", action="store_true", help="Seed an empty database from SEED_* settings")
    parser.add_argument("name", nargs="?", help="Display name")
    parser.add_argument("email", nargs="?", help="Email address")
    parser.add_argument("password", nargs="?", help="Password (6-128 chars)")
    parser.add_argument(
        "role", nargs="?", default=Role.USER.value, choices=[r.value for r in Role]
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    parser = build_parser()
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        store = AccountStore(db)
        if args.seed:
            created = seed_initial_accounts(store, settings)
            print("Seeded initial accounts." if created else "Nothing to seed.")
            return 0

        if not (args.name and args.email and args.password):
            parser.error("name, email and password are required unless --seed is given")
        try:
            draft = AccountCreate(
                name=args.name, email=args.email, password=args.password, role=args.role
            )
        except ValidationError as e:
            for err in e.errors():
                print(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
            return 1
        try:
            account = store.create(draft)
        except ServiceError as e:
            print(e.message, file=sys.stderr)
            return 1
        print(f"Created account '{account.email}' ({account.id}) with role '{account.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
