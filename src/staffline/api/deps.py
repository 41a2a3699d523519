from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from staffline.core.errors import AuthenticationError, PermissionDeniedError
from staffline.core.security import decode_access_token
from staffline.db.models import User
from staffline.db.repositories import Repository
from staffline.db.session import get_db_session

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise AuthenticationError("Authorization token required")

    user = Repository(db).get_user(decode_access_token(credentials.credentials))
    if user is None or not user.active:
        raise AuthenticationError("Invalid or expired token")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise PermissionDeniedError("Insufficient permissions")
    return user
