"""User models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserSummary(BaseModel):
    """Denormalized user shape embedded in tasks and auth responses."""

    id: str
    name: str
    email: str


class UserProfile(UserSummary):
    """User profile as returned to its owner."""

    created_at: datetime


class User(UserProfile):
    """Full user record, including the credential hash."""

    password_hash: str
    updated_at: datetime

    def summary(self) -> UserSummary:
        return UserSummary(id=self.id, name=self.name, email=self.email)

    def profile(self) -> UserProfile:
        return UserProfile(id=self.id, name=self.name, email=self.email, created_at=self.created_at)


class RegisterInput(BaseModel):
    """Registration payload."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    name: str = Field(..., min_length=2, max_length=100)


class LoginInput(BaseModel):
    """Login payload."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    """Profile edit payload; absent fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
