import pytest
from sqlalchemy.exc import OperationalError

from backend.auth import jwt_handler
from backend.auth.dependencies import AuthContext
from backend.core.errors import Conflict, Forbidden, InternalError, InvalidCredentials, NotFound, ValidationFailed
from backend.models.user import Role, User
from backend.services.accounts import AccountService


def test_register_stores_student_with_hashed_password(db) -> None:
    user = AccountService(db).register(' Ada ', ' ADA@Example.com ', 's3cret')

    stored = db.query(User).filter(User.id == user.id).one()
    assert stored.name == 'Ada'
    assert stored.email == 'ada@example.com'
    assert stored.role is Role.STUDENT
    assert stored.hashed_password != 's3cret'
    assert stored.hashed_password.startswith('$2b$')


def test_register_rejects_duplicate_email(db) -> None:
    service = AccountService(db)
    service.register('Ada', 'ada@example.com', 's3cret')

    with pytest.raises(Conflict) as exception_info:
        service.register('Other Ada', 'ADA@example.com', 'different')

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'User already exists'
    assert db.query(User).count() == 1


def test_register_requires_all_fields(db) -> None:
    with pytest.raises(ValidationFailed):
        AccountService(db).register('  ', 'ada@example.com', 's3cret')


def test_login_issues_token_matching_stored_user(db, admin) -> None:
    result = AccountService(db).login('Admin@Example.com', 'correct horse battery staple')

    claims = jwt_handler.verify_access_token(result.token)
    assert claims.user_id == admin.id
    assert claims.role is Role.ADMIN
    assert result.role is Role.ADMIN
    assert result.name == 'Admin'


def test_login_rejects_wrong_password(db, student_a) -> None:
    with pytest.raises(InvalidCredentials) as exception_info:
        AccountService(db).login('a@example.com', 'wrong password')

    assert exception_info.value.status_code == 400
    assert exception_info.value.kind == 'InvalidCredentials'


def test_login_reports_unknown_email(db) -> None:
    with pytest.raises(NotFound) as exception_info:
        AccountService(db).login('nobody@example.com', 'whatever')

    assert exception_info.value.status_code == 400
    assert exception_info.value.kind == 'NotFound'


def test_list_students_returns_only_students(db, admin, student_a, student_b, context_for) -> None:
    students = AccountService(db).list_students(context_for(admin))

    assert [student.email for student in students] == ['a@example.com', 'b@example.com']


def test_list_students_is_admin_only(db, student_a, context_for) -> None:
    with pytest.raises(Forbidden):
        AccountService(db).list_students(context_for(student_a))


def test_me_returns_caller(db, student_a, context_for) -> None:
    assert AccountService(db).me(context_for(student_a)).id == student_a.id


def test_me_reports_missing_user(db) -> None:
    with pytest.raises(NotFound) as exception_info:
        AccountService(db).me(AuthContext(user_id=999, role=Role.STUDENT))

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'User not found'


def test_register_reports_database_failure(db, monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_commit():
        raise OperationalError('COMMIT', {}, Exception('database is locked'))

    monkeypatch.setattr(db, 'commit', failing_commit)

    with pytest.raises(InternalError):
        AccountService(db).register('Ada', 'ada@example.com', 's3cret')

    assert db.query(User).count() == 0
