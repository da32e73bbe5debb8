"""Persistence for user records."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.errors import Conflict, InternalError
from backend.models.user import Role, User

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def list_by_role(self, role: Role) -> list[User]:
        return self.db.query(User).filter(User.role == role).order_by(User.id.asc()).all()

    def get_many(self, user_ids: set[int]) -> dict[int, User]:
        if not user_ids:
            return {}
        users = self.db.query(User).filter(User.id.in_(user_ids)).all()
        return {user.id: user for user in users}

    def create(self, *, name: str, email: str, hashed_password: str, role: Role = Role.STUDENT) -> User:
        user = User(name=name, email=email, hashed_password=hashed_password, role=role)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Lost a race against a concurrent registration of the same email.
            self.db.rollback()
            raise Conflict('User already exists', status_code=400) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to create user %s', email)
            raise InternalError('Database unavailable.') from exc
        self.db.refresh(user)
        return user
