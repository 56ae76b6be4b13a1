"""API dependencies."""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasktrack.auth.token import Identity, IdentityService, identity_service
from tasktrack.config import DEV_JWT_SECRET, Environment, settings
from tasktrack.db import base
from tasktrack.engine.errors import InvalidToken
from tasktrack.notify import ChangeNotifier

logger = logging.getLogger("tasktrack.api")


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session, committed when the request succeeds."""
    async with base.async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for handlers that need several independent sessions."""
    return base.async_session_factory


def get_identity_service() -> IdentityService:
    return identity_service


def get_notifier(request: Request) -> ChangeNotifier:
    return request.app.state.notifier


def extract_token(
    authorization: Optional[str],
    cookie_token: Optional[str] = None,
) -> Optional[str]:
    """Bearer header first, then the auth cookie."""
    if authorization:
        parts = authorization.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1]:
            return parts[1]
    return cookie_token or None


async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
    identity: IdentityService = Depends(get_identity_service),
) -> Identity:
    """
    Authenticate the caller.

    Accepts ``Authorization: Bearer <token>`` or the auth cookie set at
    login. Raises 401 on a missing or invalid token.
    """
    token = extract_token(authorization, request.cookies.get(settings.auth_cookie_name))
    try:
        return identity.verify(token)
    except InvalidToken as e:
        raise HTTPException(
            status_code=401,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


def validate_auth_config() -> None:
    """
    Validate authentication configuration at startup.

    Raises:
        RuntimeError: If the development token secret is used outside development
    """
    if settings.jwt_secret == DEV_JWT_SECRET:
        if settings.env != Environment.DEVELOPMENT:
            raise RuntimeError(
                f"SECURITY ERROR: development jwt_secret in {settings.env.value}. "
                "Set TASKTRACK_JWT_SECRET."
            )
        logger.warning(
            "Using the development jwt_secret. Set TASKTRACK_JWT_SECRET for any deployment."
        )
    else:
        logger.info(f"Identity tokens enabled ({settings.jwt_algorithm}) for {settings.env.value}")
