# app/services/auth_service.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import AbstractSet, Dict, Any

from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.user import UserModel
from app.domain.errors import ForbiddenError, NotFoundError, ValidationError
from app.repos.user_repo import UserRepo
from app.utils.settings import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRES_MINUTES
from app.utils.logging import get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

ROLES = frozenset({"user", "admin"})


@dataclass(frozen=True)
class CurrentUser:
    """Zweryfikowana tozsamosc z tokenu, core jej nie sprawdza ponownie."""

    id: int
    role: str
    username: str = ""


def is_authorized(role: str, allowed_roles: AbstractSet[str]) -> bool:
    return role in allowed_roles


def user_to_dict(user: UserModel) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
    }


def create_access_token(user: UserModel, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=JWT_EXPIRES_MINUTES))
    claims = {
        "sub": str(user.id),
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> CurrentUser:
    try:
        claims = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return CurrentUser(
            id=int(claims["sub"]),
            role=claims.get("role", "user"),
            username=claims.get("username", ""),
        )
    except (JWTError, KeyError, TypeError, ValueError) as e:
        logger.warning(f"JWT verification failed: {e}")
        raise ForbiddenError("Invalid or expired token")


class AuthService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, password_hash: str) -> bool:
        return pwd_context.verify(plain_password, password_hash)

    def register(self, username: str, email: str, password: str, role: str = "user") -> Dict[str, Any]:
        if role not in ROLES:
            raise ValidationError(f"Unknown role {role}")

        if self.repo.find_conflicting(username, email):
            raise ValidationError("Username or email is already taken")

        user = UserModel(
            username=username,
            email=email,
            password_hash=self.hash_password(password),
            role=role,
        )
        try:
            created = self.repo.create_user(user)
        except IntegrityError:
            self.repo.db.rollback()
            raise ValidationError("Username or email is already taken")

        logger.info(f"Registered user {created.id} ({created.username})")
        return user_to_dict(created)

    def login(self, username: str, password: str) -> Dict[str, Any]:
        user = self.repo.get_by_username(username)
        # ten sam komunikat dla zlego loginu i hasla
        if not user or not self.verify_password(password, user.password_hash):
            raise ValidationError("Invalid username or password")

        logger.info(f"User {user.id} logged in")
        return {
            "access_token": create_access_token(user),
            "token_type": "bearer",
            "user": user_to_dict(user),
        }

    def get_user(self, user_id: int) -> Dict[str, Any]:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("user")
        return user_to_dict(user)

    def update_user(self, user_id: int, username: str | None, email: str | None) -> Dict[str, Any]:
        if not username and not email:
            raise ValidationError("Nothing to update")

        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("user")

        if self.repo.find_conflicting(username, email, exclude_id=user_id):
            raise ValidationError("Username or email is already taken")

        if username:
            user.username = username
        if email:
            user.email = email
        updated = self.repo.save(user)

        logger.info(f"User {user_id} updated")
        return user_to_dict(updated)
