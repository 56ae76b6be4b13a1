"""
Account service tests: registration, login and profile edits.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.auth import AuthService, IdentityService
from tasktrack.engine import InvalidCredentials, UserNotFound, ValidationError
from tasktrack.models import LoginInput, ProfileUpdate, RegisterInput

identity = IdentityService(secret="auth-service-secret")


@pytest.mark.asyncio
async def test_register_returns_user_and_token(session: AsyncSession):
    service = AuthService(session, identity)

    user, token = await service.register(
        RegisterInput(email="dana@example.com", password="hunter22", name="Dana")
    )

    assert user.name == "Dana"
    assert user.email == "dana@example.com"
    assert identity.verify(token).user_id == user.id


@pytest.mark.asyncio
async def test_register_duplicate_email(session: AsyncSession, users):
    service = AuthService(session, identity)

    with pytest.raises(ValidationError, match="already registered"):
        await service.register(
            RegisterInput(email="alice@example.com", password="hunter22", name="Alice Two")
        )


def test_register_input_validation():
    with pytest.raises(ValueError):
        RegisterInput(email="not-an-email", password="hunter22", name="Dana")
    with pytest.raises(ValueError):
        RegisterInput(email="dana@example.com", password="short", name="Dana")
    with pytest.raises(ValueError):
        RegisterInput(email="dana@example.com", password="hunter22", name="D")


@pytest.mark.asyncio
async def test_login(session: AsyncSession, users):
    service = AuthService(session, identity)

    user, token = await service.login(LoginInput(email="bob@example.com", password="secret123"))

    assert user.id == users["bob"].id
    assert identity.verify(token).email == "bob@example.com"


@pytest.mark.asyncio
async def test_login_failures_look_the_same(session: AsyncSession, users):
    service = AuthService(session, identity)

    with pytest.raises(InvalidCredentials) as wrong_password:
        await service.login(LoginInput(email="bob@example.com", password="nope"))
    with pytest.raises(InvalidCredentials) as unknown_email:
        await service.login(LoginInput(email="zed@example.com", password="secret123"))

    assert wrong_password.value.message == unknown_email.value.message


@pytest.mark.asyncio
async def test_profile_read_and_update(session: AsyncSession, users):
    service = AuthService(session, identity)
    carol = users["carol"]

    profile = await service.get_profile(carol.id)
    assert profile.email == "carol@example.com"
    assert profile.created_at is not None

    updated = await service.update_profile(carol.id, ProfileUpdate(name="Caroline"))
    assert updated.name == "Caroline"
    assert updated.email == "carol@example.com"

    updated = await service.update_profile(carol.id, ProfileUpdate(email="caro@example.com"))
    assert updated.email == "caro@example.com"


@pytest.mark.asyncio
async def test_profile_email_must_be_unique(session: AsyncSession, users):
    service = AuthService(session, identity)

    with pytest.raises(ValidationError, match="already in use"):
        await service.update_profile(users["carol"].id, ProfileUpdate(email="alice@example.com"))

    # Keeping your own email is fine
    same = await service.update_profile(users["carol"].id, ProfileUpdate(email="carol@example.com"))
    assert same.email == "carol@example.com"


@pytest.mark.asyncio
async def test_profile_of_missing_user(session: AsyncSession):
    with pytest.raises(UserNotFound):
        await AuthService(session, identity).get_profile("ghost")


@pytest.mark.asyncio
async def test_list_users_sorted_by_name(session: AsyncSession, users):
    listed = await AuthService(session, identity).list_users()
    assert [u.name for u in listed] == ["Alice", "Bob", "Carol"]
