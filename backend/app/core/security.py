"""
Identity token handling.

Sign-in, sessions and token issuance belong to the external identity
provider. This module only turns a bearer token it signed into the
claims the booking service needs.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be decoded or lacks a subject."""


@dataclass(frozen=True)
class Identity:
    subject: str
    email: str = ""
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    picture: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"{self.first_name} {self.last_name}".strip()


def decode_identity_token(token: str) -> Identity:
    options = {"verify_aud": settings.auth_jwt_audience is not None}
    try:
        claims = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=settings.auth_jwt_audience,
            options=options,
        )
    except JWTError as e:
        logger.info(f"Rejected identity token: {e}")
        raise InvalidTokenError(str(e)) from e

    subject = claims.get("sub")
    if not subject:
        raise InvalidTokenError("token has no subject")

    return Identity(
        subject=str(subject),
        email=claims.get("email") or "",
        name=claims.get("name") or "",
        first_name=claims.get("given_name") or "",
        last_name=claims.get("family_name") or "",
        picture=claims.get("picture"),
    )


def create_identity_token(subject: str, **claims) -> str:
    """Sign a token the same way the identity provider does (seeding and tests)."""
    payload = {"sub": subject, **claims}
    return jwt.encode(payload, settings.auth_jwt_secret, algorithm=settings.auth_jwt_algorithm)
