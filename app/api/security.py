# app/api/security.py
from typing import AbstractSet

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.domain.errors import AuthError, ForbiddenError
from app.services.auth_service import CurrentUser, decode_access_token, is_authorized

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthError("Missing or invalid Authorization header")
    return decode_access_token(credentials.credentials)


class RoleGuard:
    """Etap przed handlerem: przepuszcza tylko role z allowed_roles."""

    def __init__(self, allowed_roles: AbstractSet[str]):
        self.allowed_roles = frozenset(allowed_roles)

    def __call__(self, user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not is_authorized(user.role, self.allowed_roles):
            raise ForbiddenError("Access denied: insufficient permissions")
        return user


require_admin = RoleGuard({"admin"})
