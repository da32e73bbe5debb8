from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.auth.dependencies import AuthContext, get_auth_context
from backend.database import get_db
from backend.routes.auth_routes import UserSummaryResponse
from backend.services.accounts import AccountService

router = APIRouter(tags=['students'])


@router.get('', response_model=list[UserSummaryResponse])
def list_students(context: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
    return AccountService(db).list_students(context)
