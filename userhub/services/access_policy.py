"""Access policy: pure decisions about who may do what to which account."""

import enum
from dataclasses import dataclass

from userhub.core.errors import ForbiddenError
from userhub.models.account import Role
from userhub.schemas.account import AccountUpdate
from userhub.schemas.auth import CurrentUser

SELF_DEMOTION_MESSAGE = "Admins cannot remove their own admin role."
ROLE_CHANGE_MESSAGE = "Only admins can change roles."
ADMIN_REQUIRED_MESSAGE = "Admin access required"
OTHER_ACCOUNT_MESSAGE = "Forbidden"


class Action(str, enum.Enum):
    LIST = "list"
    LIST_INACTIVE = "list_inactive"
    CREATE = "create"
    DELETE = "delete"
    READ = "read"
    UPDATE = "update"


ADMIN_ONLY_ACTIONS = frozenset({Action.LIST, Action.LIST_INACTIVE, Action.CREATE, Action.DELETE})


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy check. reason is a stable code; message is client-facing."""

    allowed: bool
    reason: str | None = None
    message: str | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, message: str) -> "Decision":
        return cls(allowed=False, reason="forbidden", message=message)


def can_access(
    requester: CurrentUser,
    action: Action,
    target_id: str | None = None,
    patch: AccountUpdate | None = None,
) -> Decision:
    """
    Decide whether requester may perform action on the account target_id.

    Rules, first match wins:
    1. list, list_inactive, create, delete require the admin role.
    2. read/update of an account: admins, or the account's owner.
    3. An admin updating their own account may not set a non-admin role.
    4. A non-admin may not change their own role.
    """
    is_admin = requester.role == Role.ADMIN

    if action in ADMIN_ONLY_ACTIONS:
        return Decision.allow() if is_admin else Decision.deny(ADMIN_REQUIRED_MESSAGE)

    is_self = target_id is not None and requester.id == target_id
    if not (is_admin or is_self):
        return Decision.deny(OTHER_ACCOUNT_MESSAGE)

    if action == Action.UPDATE and is_self and patch is not None and patch.role is not None:
        if is_admin and patch.role != Role.ADMIN:
            return Decision.deny(SELF_DEMOTION_MESSAGE)
        if not is_admin and patch.role != requester.role:
            return Decision.deny(ROLE_CHANGE_MESSAGE)

    return Decision.allow()


def enforce(decision: Decision) -> None:
    """Raise ForbiddenError when the decision is a denial."""
    if not decision.allowed:
        raise ForbiddenError(decision.message or OTHER_ACCOUNT_MESSAGE)
