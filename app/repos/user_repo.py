from sqlalchemy import select, or_
from sqlalchemy.orm import Session
from app.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_username(self, username: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.username == username)
        ).scalar_one_or_none()

    def find_conflicting(self, username: str | None, email: str | None, exclude_id: int | None = None) -> UserModel | None:
        conditions = []
        if username:
            conditions.append(UserModel.username == username)
        if email:
            conditions.append(UserModel.email == email)
        if not conditions:
            return None

        stmt = select(UserModel).where(or_(*conditions))
        if exclude_id is not None:
            stmt = stmt.where(UserModel.id != exclude_id)
        return self.db.execute(stmt).scalars().first()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def save(self, user: UserModel) -> UserModel:
        self.db.commit()
        self.db.refresh(user)
        return user
