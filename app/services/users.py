"""User registration and login."""

from __future__ import annotations

import hashlib
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError, ConflictError, NotFoundError, StorageError
from app.models.user import User

logger = logging.getLogger(__name__)


def hash_password(password: str, nickname: str) -> str:
    """SHA-256 of password + nickname (nickname acts as the salt)."""
    return hashlib.sha256(f"{password}{nickname}".encode("utf-8")).hexdigest()


def get_user_by_nickname(db: Session, nickname: str) -> User | None:
    try:
        return db.execute(select(User).where(User.nickname == nickname)).scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load user", str(exc)) from exc


def register_user(db: Session, nickname: str, password: str) -> User:
    """Create an account; nicknames are unique."""
    if get_user_by_nickname(db, nickname) is not None:
        raise ConflictError("Nickname already exists", nickname)
    user = User(nickname=nickname, password_hash=hash_password(password, nickname))
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        # 동시에 같은 닉네임으로 가입한 경우
        db.rollback()
        raise ConflictError("Nickname already exists", nickname) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to register user", str(exc)) from exc
    logger.info("Registered user id=%s nickname=%s", user.id, nickname)
    return user


def authenticate(db: Session, nickname: str, password: str) -> User:
    """Return the user when the credentials match."""
    user = get_user_by_nickname(db, nickname)
    if user is None or user.password_hash != hash_password(password, nickname):
        logger.info("Login failed for nickname=%s", nickname)
        raise AuthenticationError("Invalid nickname or password")
    return user


def lookup_user(db: Session, nickname: str) -> User:
    user = get_user_by_nickname(db, nickname)
    if user is None:
        raise NotFoundError("User not found", nickname)
    return user
