"""Registration, JWT login and the bearer-token dependency (get_current_user)."""

from typing import Annotated

import jwt
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from userhub.api.v1.deps import get_account_store, get_auth_service
from userhub.core.security import decode_access_token
from userhub.schemas.account import AccountCreate, AccountRead, AccountSummary
from userhub.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from userhub.services.account_store import AccountStore
from userhub.services.auth import AuthService

router = APIRouter()
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/register", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
def register(
    body: AccountCreate,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> AccountRead:
    """Create an account. The password is hashed and never echoed back."""
    account = auth_service.register(body)
    return AccountRead.model_validate(account)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    background_tasks: BackgroundTasks,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token valid for 24 hours.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    result = auth_service.login(body.email, body.password)
    background_tasks.add_task(auth_service.record_login, result.account.id)
    return TokenResponse(
        access_token=result.access_token,
        token_type="bearer",
        user=AccountSummary.model_validate(result.account),
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: Annotated[AccountStore, Depends(get_account_store)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    sub = payload.get("sub")
    if not sub or not isinstance(sub, str):
        raise _unauthorized("Invalid token payload")
    # Role comes from the stored account so a demotion takes effect before the token expires.
    account = store.find_by_id(sub)
    if account is None:
        raise _unauthorized("User not found")
    return CurrentUser(id=account.id, email=account.email, role=account.role)
