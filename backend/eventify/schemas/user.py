"""
Pydantic schemas for user-related request/response validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100, pattern=r"^[a-zA-Z0-9_]+$")
    password: str = Field(..., min_length=8, max_length=72)
    full_name: str = Field(..., min_length=1, max_length=255)
    is_organizer: bool = False
    avatar_url: Optional[str] = Field(None, max_length=500)


class UserLogin(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    id: int
    email: str
    username: str
    full_name: str
    is_organizer: bool
    avatar_url: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class UserPublic(BaseModel):
    """What other people may see about a user (e.g. an event's organizer)."""

    id: int
    username: str
    full_name: str
    avatar_url: Optional[str]

    model_config = {"from_attributes": True}


class SessionResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


class AuthStatus(BaseModel):
    authenticated: bool
    user: Optional[UserResponse] = None
