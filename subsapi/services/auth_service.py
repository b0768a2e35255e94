# subsapi/services/auth_service.py
"""
Token issuance/validation and credential hashing.

Tokens are HS256 JWTs carrying the user id (``sub``) and username
(``name``), bound to the configured issuer and audience. Validation allows no
clock skew.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable

import jwt
from passlib.context import CryptContext

from subsapi.errors import InvalidToken
from subsapi.utils.dates import now_utc

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class Identity:
    user_id: int
    username: str


class AuthProvider:
    def __init__(
        self,
        secret: str,
        *,
        issuer: str,
        audience: str,
        expire_minutes: int = 60,
        algorithm: str = "HS256",
        clock: Callable[[], Any] = now_utc,
    ) -> None:
        self.secret = secret
        self.issuer = issuer
        self.audience = audience
        self.expire_minutes = expire_minutes
        self.algorithm = algorithm
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Any) -> "AuthProvider":
        return cls(
            settings.JWT_SECRET_KEY,
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
            expire_minutes=settings.JWT_EXPIRATION_MINUTES,
            algorithm=settings.JWT_ALGORITHM,
        )

    # ---------- credentials ----------

    @staticmethod
    def hash_password(raw: str) -> str:
        return pwd_context.hash(raw)

    @staticmethod
    def verify_password(raw: str, hashed: str) -> bool:
        try:
            return pwd_context.verify(raw, hashed)
        except (ValueError, TypeError):
            # unknown or malformed hash in storage
            logger.warning("password hash could not be identified")
            return False

    # ---------- tokens ----------

    def issue(self, user: Any) -> str:
        now = self.clock()
        payload = {
            "sub": str(user.id),
            "name": user.username,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def validate(self, token: str) -> Identity:
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                leeway=0,
                options={"require": ["exp", "sub", "iss", "aud"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidToken("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidToken("Invalid token") from e

        try:
            user_id = int(claims["sub"])
        except (TypeError, ValueError) as e:
            raise InvalidToken("Invalid token subject") from e
        if user_id <= 0:
            raise InvalidToken("Invalid token subject")
        return Identity(user_id=user_id, username=str(claims.get("name", "")))
