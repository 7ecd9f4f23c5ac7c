"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from userhub.models.account import Role
from userhub.schemas.account import AccountSummary


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, max_length=1024, description="Password")


class TokenResponse(BaseModel):
    """JWT access token returned after successful login, with the caller's identity."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: AccountSummary


class CurrentUser(BaseModel):
    """Authenticated requester (id, email, role) resolved from the bearer token."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: Role
