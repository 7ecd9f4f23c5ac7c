"""Pydantic request/response schemas."""

from userhub.schemas.account import (
    AccountCreate,
    AccountFilter,
    AccountRead,
    AccountSummary,
    AccountUpdate,
    MessageResponse,
)
from userhub.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from userhub.schemas.health import HealthResponse

__all__ = [
    "AccountCreate",
    "AccountFilter",
    "AccountRead",
    "AccountSummary",
    "AccountUpdate",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "TokenResponse",
]
