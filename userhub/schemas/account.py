"""Request/response schemas for account records. The password hash never appears here."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from userhub.core.security import (
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    normalize_password,
)
from userhub.models.account import Role


def _validate_name(value: str) -> str:
    """Names are trimmed and must stay non-empty."""
    stripped = value.strip()
    if not stripped:
        raise ValueError("name must be non-empty")
    if len(stripped) > NAME_MAX_LEN:
        raise ValueError(f"name must be at most {NAME_MAX_LEN} characters")
    return stripped


def _validate_password(value: str) -> str:
    """Check length after the same normalization used for hashing."""
    normalized = normalize_password(value)
    if not PASSWORD_MIN_LEN <= len(normalized) <= PASSWORD_MAX_LEN:
        raise ValueError(
            f"password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters"
        )
    return normalized


class AccountCreate(BaseModel):
    """Draft for a new account (registration or admin create)."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="Unique email address")
    password: str = Field(..., description="Plain-text password; hashed before storage")
    role: Role = Field(default=Role.USER, description="admin or user")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class AccountUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    email: EmailStr | None = None
    password: str | None = None
    role: Role | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return None if v is None else _validate_name(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str | None:
        return None if v is None else _validate_password(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return None if v is None else v.lower()

    def changes(self) -> dict:
        """Fields explicitly set to a value, as a plain dict."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class AccountFilter(BaseModel):
    """Query options for list and inactivity reports. Sort field and order are checked by the store."""

    role: Role | None = None
    sort_by: str | None = None
    order: str | None = None


class AccountRead(BaseModel):
    """Account as returned to API clients (camelCase keys, no password hash)."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    name: str
    email: str
    role: Role
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime


class AccountSummary(BaseModel):
    """Compact account identity embedded in the login response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: Role


class MessageResponse(BaseModel):
    message: str
