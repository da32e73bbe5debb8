import os

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret')
os.environ.setdefault('BCRYPT_ROUNDS', '4')

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from backend.auth import jwt_handler  # noqa: E402
from backend.auth.dependencies import AuthContext  # noqa: E402
from backend.database import Base  # noqa: E402
from backend.models.task import Task  # noqa: E402
from backend.models.user import Role, User  # noqa: E402
from backend.services.accounts import AccountService  # noqa: E402

PASSWORD = 'correct horse battery staple'


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[User.__table__, Task.__table__])
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine, tables=[Task.__table__, User.__table__])
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make_user(name: str, email: str, role: Role = Role.STUDENT, password: str = PASSWORD) -> User:
        return AccountService(db).create_user(name, email, password, role=role)

    return _make_user


@pytest.fixture
def admin(make_user) -> User:
    return make_user('Admin', 'admin@example.com', Role.ADMIN)


@pytest.fixture
def student_a(make_user) -> User:
    return make_user('Student A', 'a@example.com')


@pytest.fixture
def student_b(make_user) -> User:
    return make_user('Student B', 'b@example.com')


def _context_for(user: User) -> AuthContext:
    return AuthContext(user_id=user.id, role=user.role)


def _bearer_headers(user: User) -> dict[str, str]:
    token = jwt_handler.create_access_token(subject=user.id, role=user.role)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def context_for():
    return _context_for


@pytest.fixture
def bearer_headers():
    return _bearer_headers


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient

    from backend.database import get_db
    from backend.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
