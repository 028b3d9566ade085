"""Pydantic schemas for registration, login, and user endpoints."""
from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.validators import MIN_PASSWORD_LENGTH, validate_email, validate_password_bytes


class RegisterRequest(BaseModel):
    """Schema for registering a new account."""

    email: str
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Trim, lower-case, and validate the email."""
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, v: str) -> str:
        """Keep passwords within bcrypt's input limit."""
        return validate_password_bytes(v)


class LoginRequest(BaseModel):
    """Schema for logging in."""

    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Trim, lower-case, and validate the email."""
        return validate_email(v)


class UserResponse(BaseModel):
    """Public view of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str


class AuthResponse(BaseModel):
    """Returned by register and login: the user plus a fresh session token."""

    message: str
    token: str
    user: UserResponse


class CurrentUserResponse(BaseModel):
    """Returned by the current-user lookup."""

    user: UserResponse
