"""Registration, login and profile management."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.auth.passwords import hash_password, verify_password
from tasktrack.auth.token import IdentityService, identity_service
from tasktrack.db.repositories import UserRepository
from tasktrack.engine.errors import InvalidCredentials, UserNotFound, ValidationError
from tasktrack.models import (
    LoginInput,
    ProfileUpdate,
    RegisterInput,
    UserProfile,
    UserSummary,
)

logger = logging.getLogger(__name__)


class AuthService:
    """User account operations backed by the identity service."""

    def __init__(self, session: AsyncSession, identity: IdentityService | None = None):
        self.session = session
        self.users = UserRepository(session)
        self.identity = identity or identity_service

    async def register(self, data: RegisterInput) -> tuple[UserSummary, str]:
        """Create an account and return it with a fresh token."""
        if await self.users.get_by_email(data.email):
            raise ValidationError("Email already registered")

        user = await self.users.create(
            email=data.email,
            name=data.name,
            password_hash=hash_password(data.password),
        )
        logger.info(f"Registered user {user.id}")
        return user.summary(), self.identity.issue(user.id, user.email)

    async def login(self, data: LoginInput) -> tuple[UserSummary, str]:
        # Same error for unknown email and wrong password
        user = await self.users.get_by_email(data.email)
        if not user or not verify_password(data.password, user.password_hash):
            raise InvalidCredentials()

        return user.summary(), self.identity.issue(user.id, user.email)

    async def get_profile(self, user_id: str) -> UserProfile:
        user = await self.users.get(user_id)
        if not user:
            raise UserNotFound(user_id)
        return user.profile()

    async def update_profile(self, user_id: str, data: ProfileUpdate) -> UserSummary:
        """Edit name and/or email; the new email must not belong to someone else."""
        values: dict[str, Any] = data.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in values:
            existing = await self.users.get_by_email(values["email"])
            if existing and existing.id != user_id:
                raise ValidationError("Email already in use")

        user = await self.users.update(user_id, values)
        if not user:
            raise UserNotFound(user_id)
        return user.summary()

    async def list_users(self) -> list[UserSummary]:
        return await self.users.list_all()
