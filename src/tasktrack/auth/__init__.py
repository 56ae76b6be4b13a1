"""TaskTrack authentication module."""

from tasktrack.auth.passwords import hash_password, verify_password
from tasktrack.auth.service import AuthService
from tasktrack.auth.token import Identity, IdentityService, identity_service

__all__ = [
    "AuthService",
    "Identity",
    "IdentityService",
    "hash_password",
    "identity_service",
    "verify_password",
]
