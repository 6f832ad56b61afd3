from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.schemas import RegisterIn, LoginIn, UserRead, TokenOut
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserRead, status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    return AuthService(db).register(payload.username, payload.email, payload.password)


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    return AuthService(db).login(payload.username, payload.password)
