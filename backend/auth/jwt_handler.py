from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from backend.core import config
from backend.core.errors import InvalidToken
from backend.models.user import Role


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: Role


def create_access_token(
    subject: int | str,
    role: Role | str,
    expires_minutes: int | None = None,
    issued_at: datetime | None = None,
) -> str:
    expire_minutes = config.JWT_EXPIRES_MINUTES if expires_minutes is None else expires_minutes
    issued = issued_at or datetime.now(timezone.utc)
    expire = issued + timedelta(minutes=expire_minutes)
    payload = {"sub": str(subject), "role": Role(role).value, "exp": expire, "iat": issued}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        options={"require": ["sub", "exp", "iat"]},
    )


def verify_access_token(token: str) -> TokenClaims:
    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise InvalidToken("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidToken("Invalid token") from exc

    try:
        return TokenClaims(user_id=int(payload["sub"]), role=Role(payload.get("role")))
    except (TypeError, ValueError) as exc:
        raise InvalidToken("Invalid token payload") from exc
