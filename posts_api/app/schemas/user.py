"""
Pydantic models for user data.

Defines schemas for signing up, logging in and reading a user
profile.  ``UserRead`` deliberately has no password field: the stored
hash never leaves the service.
"""

import uuid
from datetime import datetime
from typing import Annotated

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, Field


def _check_email(value: str) -> str:
    # Validate the format but keep the address exactly as supplied;
    # emails are compared case-sensitively.
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(f"Invalid email format: {exc}") from exc
    return value


EmailAddress = Annotated[str, AfterValidator(_check_email)]


class SignupRequest(BaseModel):
    """Schema for creating an account."""

    email: EmailAddress = Field(..., examples=["user@example.com"])
    username: str = Field(..., min_length=3, max_length=20, examples=["alice"])
    password: str = Field(..., min_length=8, max_length=100, examples=["password123"])


class LoginRequest(BaseModel):
    email: EmailAddress = Field(..., examples=["user@example.com"])
    password: str


class UserRead(BaseModel):
    """Public user profile."""

    id: uuid.UUID
    email: str
    username: str
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }


class AuthResponse(BaseModel):
    token: str
    user: UserRead
