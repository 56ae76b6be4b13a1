"""Authentication endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.api.deps import get_current_identity, get_db_session, get_identity_service
from tasktrack.api.schemas import AuthResponse, MessageResponse, ProfileUpdateResponse
from tasktrack.auth import AuthService, Identity, IdentityService
from tasktrack.config import settings
from tasktrack.engine import AuthError, NotFoundError, ValidationError
from tasktrack.models import LoginInput, ProfileUpdate, RegisterInput, UserProfile

auth_router = APIRouter(prefix="/v1/auth", tags=["auth"])


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        max_age=settings.jwt_access_token_ttl_days * 24 * 60 * 60,
    )


@auth_router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    request: RegisterInput,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
    identity: IdentityService = Depends(get_identity_service),
):
    """Register a new user and sign them in."""
    service = AuthService(session, identity)

    try:
        user, token = await service.register(request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    _set_auth_cookie(response, token)
    return AuthResponse(message="User registered successfully", user=user, token=token)


@auth_router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginInput,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
    identity: IdentityService = Depends(get_identity_service),
):
    service = AuthService(session, identity)

    try:
        user, token = await service.login(request)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=e.message)

    _set_auth_cookie(response, token)
    return AuthResponse(message="Login successful", user=user, token=token)


@auth_router.get("/profile", response_model=UserProfile)
async def get_profile(
    session: AsyncSession = Depends(get_db_session),
    current: Identity = Depends(get_current_identity),
):
    try:
        return await AuthService(session).get_profile(current.user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@auth_router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(
    request: ProfileUpdate,
    session: AsyncSession = Depends(get_db_session),
    current: Identity = Depends(get_current_identity),
):
    try:
        user = await AuthService(session).update_profile(current.user_id, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    return ProfileUpdateResponse(message="Profile updated successfully", user=user)


@auth_router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    current: Identity = Depends(get_current_identity),
):
    """Clear the auth cookie. Tokens are stateless and stay valid until expiry."""
    response.delete_cookie(settings.auth_cookie_name)
    return MessageResponse(message="Logout successful")
