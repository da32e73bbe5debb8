from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.auth import jwt_handler
from backend.core.errors import InvalidToken, Unauthorized
from backend.models.user import Role

# Missing or non-Bearer credentials arrive as None and are rejected below.
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller, as established from a verified token."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def authenticate(credentials: HTTPAuthorizationCredentials | None) -> AuthContext:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthorized("No token")

    try:
        claims = jwt_handler.verify_access_token(credentials.credentials)
    except InvalidToken as exc:
        raise Unauthorized(str(exc)) from exc

    return AuthContext(user_id=claims.user_id, role=claims.role)


def get_auth_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthContext:
    context = authenticate(credentials)
    request.state.auth = context
    return context
