from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from backend.auth.dependencies import AuthContext, get_auth_context
from backend.database import get_db
from backend.models.user import Role
from backend.services.accounts import AccountService, normalize_email

router = APIRouter(tags=['auth'])


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    email: str
    password: str = Field(min_length=1)

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = normalize_email(value)
        if '@' not in normalized:
            raise ValueError('A valid email is required.')
        return normalized


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class LoginResponse(BaseModel):
    token: str
    role: Role
    name: str


class MessageResponse(BaseModel):
    message: str


class UserSummaryResponse(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class ProfileResponse(UserSummaryResponse):
    role: Role


@router.post('/register', response_model=MessageResponse)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    AccountService(db).register(data.name, data.email, data.password)
    return MessageResponse(message='Registered successfully')


@router.post('/login', response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    result = AccountService(db).login(data.email, data.password)
    return LoginResponse(token=result.token, role=result.role, name=result.name)


@router.get('/me', response_model=ProfileResponse)
def me(context: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
    return AccountService(db).me(context)
