"""Identity token issue/verify."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from tasktrack.config import settings
from tasktrack.engine.errors import InvalidToken
from tasktrack.utils.time import utc_now


@dataclass(frozen=True)
class Identity:
    """Verified identity carried by a token."""

    user_id: str
    email: str


class IdentityService:
    """Issues and verifies signed identity tokens."""

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        ttl_days: Optional[int] = None,
    ):
        self.secret = secret or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        if ttl_days is None:
            ttl_days = settings.jwt_access_token_ttl_days
        self.ttl = timedelta(days=ttl_days)

    def issue(self, user_id: str, email: str) -> str:
        now = utc_now()
        claims = {
            "sub": user_id,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str | None) -> Identity:
        """Return the identity in a token or raise InvalidToken."""
        if not token:
            raise InvalidToken("Missing authorization token")

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise InvalidToken("Token expired") from exc
        except JWTError as exc:
            raise InvalidToken(f"Invalid token: {exc}") from exc

        subject = payload.get("sub")
        email = payload.get("email")
        if not subject or not email:
            raise InvalidToken("Token is missing identity claims")

        return Identity(user_id=subject, email=email)


identity_service = IdentityService()
