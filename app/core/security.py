"""Password hashing and bearer token handling.

Secrets are passed into :class:`TokenService` at construction time;
nothing here reads process configuration on its own.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenDecodeError(RuntimeError):
    """Raised when a bearer token is invalid, expired or malformed."""


@dataclass
class AccessToken:
    token: str
    expires_at: datetime
    jti: str


@dataclass
class TokenPayload:
    subject: str
    expires_at: datetime
    issued_at: datetime
    jti: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


@dataclass(slots=True)
class TokenService:
    secret_key: str
    algorithm: str = "HS256"
    expire_minutes: int = 60 * 24

    def create_access_token(self, subject: str, expires_delta: timedelta | None = None) -> AccessToken:
        now = datetime.now(timezone.utc)
        expires = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        jti = uuid4().hex
        payload: dict[str, Any] = {
            "sub": subject,
            "exp": int(expires.timestamp()),
            "iat": int(now.timestamp()),
            "jti": jti,
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return AccessToken(token=token, expires_at=expires, jti=jti)

    def decode_access_token(self, token: str) -> TokenPayload:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as exc:
            raise TokenDecodeError("Token verification failed") from exc

        subject = payload.get("sub")
        jti = payload.get("jti")
        exp = payload.get("exp")
        iat = payload.get("iat")
        if not subject or not jti or exp is None or iat is None:
            raise TokenDecodeError("Token payload is incomplete")

        return TokenPayload(
            subject=str(subject),
            expires_at=datetime.fromtimestamp(int(exp), tz=timezone.utc),
            issued_at=datetime.fromtimestamp(int(iat), tz=timezone.utc),
            jti=str(jti),
        )
