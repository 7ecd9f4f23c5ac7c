"""Role-gated account CRUD and the inactive-accounts report."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, status

from userhub.api.v1.auth import get_current_user
from userhub.api.v1.deps import get_account_filter, get_account_store, get_audit_recorder
from userhub.models import Role
from userhub.schemas.account import (
    AccountCreate,
    AccountFilter,
    AccountRead,
    AccountUpdate,
    MessageResponse,
)
from userhub.schemas.auth import CurrentUser
from userhub.services.access_policy import Action, can_access, enforce
from userhub.services.account_store import AccountStore
from userhub.services.audit import AuditRecorder

router = APIRouter()


@router.post("", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
def create_user(
    body: AccountCreate,
    background_tasks: BackgroundTasks,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[AccountStore, Depends(get_account_store)],
    audit: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> AccountRead:
    """Create an account with any role (admin only)."""
    enforce(can_access(current_user, Action.CREATE))
    account = store.create(body)
    background_tasks.add_task(
        audit.record,
        current_user.id,
        "create",
        account.id,
        body.model_dump(mode="json"),
    )
    return AccountRead.model_validate(account)


@router.get("", response_model=list[AccountRead])
def list_users(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    account_filter: Annotated[AccountFilter, Depends(get_account_filter)],
    store: Annotated[AccountStore, Depends(get_account_store)],
) -> list[AccountRead]:
    """List accounts (admin only). Newest first unless sortBy is given."""
    enforce(can_access(current_user, Action.LIST))
    return [AccountRead.model_validate(a) for a in store.list(account_filter)]


@router.get("/inactive", response_model=list[AccountRead])
def list_inactive_users(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    account_filter: Annotated[AccountFilter, Depends(get_account_filter)],
    store: Annotated[AccountStore, Depends(get_account_store)],
) -> list[AccountRead]:
    """
    Accounts that never logged in or have not logged in within INACTIVITY_DAYS (admin only).
    Never-logged-in accounts come first unless sortBy is given.
    """
    enforce(can_access(current_user, Action.LIST_INACTIVE))
    return [AccountRead.model_validate(a) for a in store.list_inactive(account_filter)]


@router.get("/{account_id}", response_model=AccountRead)
def get_user(
    account_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[AccountStore, Depends(get_account_store)],
) -> AccountRead:
    """Fetch one account (self or admin)."""
    enforce(can_access(current_user, Action.READ, target_id=account_id))
    return AccountRead.model_validate(store.get(account_id))


@router.patch("/{account_id}", response_model=AccountRead)
def update_user(
    account_id: str,
    body: AccountUpdate,
    background_tasks: BackgroundTasks,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[AccountStore, Depends(get_account_store)],
    audit: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> AccountRead:
    """Update name, email, password or role (self or admin; admins cannot demote themselves)."""
    enforce(can_access(current_user, Action.UPDATE, target_id=account_id, patch=body))
    account = store.update(account_id, body)
    if current_user.role == Role.ADMIN:
        background_tasks.add_task(
            audit.record,
            current_user.id,
            "update",
            account_id,
            body.model_dump(mode="json", exclude_unset=True, exclude_none=True),
        )
    return AccountRead.model_validate(account)


@router.delete("/{account_id}", response_model=MessageResponse)
def delete_user(
    account_id: str,
    background_tasks: BackgroundTasks,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[AccountStore, Depends(get_account_store)],
    audit: Annotated[AuditRecorder, Depends(get_audit_recorder)],
) -> MessageResponse:
    """Hard-delete an account (admin only)."""
    enforce(can_access(current_user, Action.DELETE))
    store.delete(account_id)
    background_tasks.add_task(audit.record, current_user.id, "delete", account_id)
    return MessageResponse(message="User deleted successfully")
