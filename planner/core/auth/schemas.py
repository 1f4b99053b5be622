# planner/core/auth/schemas.py

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Token(BaseModel):
    """JWT returned to the client."""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Data carried inside a JWT; ``sub`` holds the user id."""
    user_id: int | None = Field(None, description="User ID within our application")


class RegisterRequest(BaseModel):
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    username: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str | None = Field(None, max_length=128)
    last_name: str | None = Field(None, max_length=128)


class LoginRequest(BaseModel):
    username_or_email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    username: str
    first_name: str | None = None
    last_name: str | None = None
    token: str | None = None
