from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.security import get_current_user
from app.data.database import get_db
from app.domain.errors import ForbiddenError
from app.domain.schemas import UserRead, UserUpdate
from app.services.auth_service import AuthService, CurrentUser

router = APIRouter(prefix="/users", tags=["users"])


def _own_id(user_id: int, user: CurrentUser) -> None:
    if user_id != user.id:
        raise ForbiddenError("Access denied")


@router.get("/me", response_model=UserRead)
def get_me(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return AuthService(db).get_user(user.id)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    _own_id(user_id, user)
    return AuthService(db).get_user(user_id)


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: UserUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _own_id(user_id, user)
    return AuthService(db).update_user(user_id, payload.username, payload.email)
