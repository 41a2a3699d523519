from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from staffline.core.errors import ConflictError
from staffline.core.security import hash_password
from staffline.db.models import User
from staffline.db.repositories import Repository
from staffline.types import UserCreate

logger = logging.getLogger(__name__)

DUPLICATE_USER = "User with this username or email already exists"


def register_user(session: Session, payload: UserCreate) -> User:
    repo = Repository(session)
    if repo.get_user_by_username(payload.username) or repo.get_user_by_email(payload.email):
        raise ConflictError(DUPLICATE_USER)

    try:
        user = repo.create_user(
            username=payload.username,
            email=payload.email,
            password_hash=hash_password(payload.password),
            role=payload.role,
        )
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError(DUPLICATE_USER) from exc

    logger.info("user %s registered with role %s", user.username, user.role)
    return user
