"""Registration, login and user listings."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from backend.auth import jwt_handler
from backend.auth.dependencies import AuthContext
from backend.auth.password import hash_password, verify_password
from backend.core.errors import Conflict, InvalidCredentials, NotFound, ValidationFailed
from backend.models.user import Role, User
from backend.services.policy import Operation, authorize
from backend.stores.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    role: Role
    name: str


def normalize_email(email: str) -> str:
    return (email or '').strip().lower()


class AccountService:
    def __init__(self, db: Session):
        self.users = UserStore(db)

    def register(self, name: str, email: str, password: str) -> User:
        """Create a student account.

        The role is always ``student``; admins are seeded out of band.
        """
        return self.create_user(name, email, password, role=Role.STUDENT)

    def create_user(self, name: str, email: str, password: str, role: Role) -> User:
        name = (name or '').strip()
        email = normalize_email(email)
        if not name or not email or not password:
            raise ValidationFailed('Name, email and password are required.')

        if self.users.find_by_email(email) is not None:
            raise Conflict('User already exists', status_code=400)

        user = self.users.create(
            name=name,
            email=email,
            hashed_password=hash_password(password),
            role=role,
        )
        logger.info('Registered user %s with role %s', user.id, role.value)
        return user

    def login(self, email: str, password: str) -> LoginResult:
        user = self.users.find_by_email(normalize_email(email))
        if user is None:
            logger.warning('Login attempt for unknown email')
            raise NotFound('User not found', status_code=400)

        if not verify_password(password or '', user.hashed_password):
            logger.warning('Failed login for user %s', user.id)
            raise InvalidCredentials('Invalid credentials')

        token = jwt_handler.create_access_token(subject=user.id, role=user.role)
        logger.info('User %s logged in', user.id)
        return LoginResult(token=token, role=user.role, name=user.name)

    def me(self, context: AuthContext) -> User:
        user = self.users.get(context.user_id)
        if user is None:
            raise NotFound('User not found')
        return user

    def list_students(self, context: AuthContext) -> list[User]:
        authorize(context, Operation.LIST_STUDENTS)
        return self.users.list_by_role(Role.STUDENT)
