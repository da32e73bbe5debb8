from types import SimpleNamespace

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from backend.auth import jwt_handler
from backend.auth.dependencies import AuthContext, authenticate, get_auth_context
from backend.core.errors import Unauthorized
from backend.models.user import Role


class _FakeRequest:
    def __init__(self):
        self.state = SimpleNamespace()


def _credentials(token: str, scheme: str = 'Bearer') -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme=scheme, credentials=token)


def test_authenticate_rejects_missing_credentials() -> None:
    with pytest.raises(Unauthorized) as exception_info:
        authenticate(None)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'No token'


def test_authenticate_rejects_non_bearer_scheme() -> None:
    token = jwt_handler.create_access_token(subject=1, role=Role.STUDENT)

    with pytest.raises(Unauthorized):
        authenticate(_credentials(token, scheme='Basic'))


def test_authenticate_rejects_invalid_token() -> None:
    with pytest.raises(Unauthorized) as exception_info:
        authenticate(_credentials('invalid'))

    assert exception_info.value.detail == 'Invalid token'


def test_get_auth_context_attaches_context_to_request() -> None:
    token = jwt_handler.create_access_token(subject=7, role=Role.ADMIN)
    request = _FakeRequest()

    context = get_auth_context(request, _credentials(token))

    assert context == AuthContext(user_id=7, role=Role.ADMIN)
    assert context.is_admin is True
    assert request.state.auth is context


def test_get_auth_context_leaves_request_untouched_on_failure() -> None:
    request = _FakeRequest()

    with pytest.raises(Unauthorized):
        get_auth_context(request, None)

    assert not hasattr(request.state, 'auth')
