# expense_manager/services/credential_service.py
import logging
import os
import secrets
from datetime import timedelta
from typing import Optional
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
from expense_manager.models.base import as_utc, utcnow
from expense_manager.models.user import User
from expense_manager.services.errors import EntityConflictError, EntityNotFoundError, InvalidResetTokenError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

RESET_TOKEN_TTL = timedelta(minutes=int(os.environ.get("RESET_TOKEN_TTL_MINUTES", "60")))


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def get_user_by_username(session: Session, username: str) -> Optional[User]:
    return session.exec(select(User).where(User.username == username)).first()


def create_user(session: Session, username: str, password: str) -> User:
    if get_user_by_username(session, username) is not None:
        raise EntityConflictError(f"Username {username!r} is already taken")
    user = User(username=username, password_hash=hash_password(password))
    session.add(user)
    try:
        session.flush()
    except IntegrityError as exc:
        raise EntityConflictError(f"Username {username!r} is already taken") from exc
    session.refresh(user)
    logger.info("created user %s", username)
    return user


def authenticate(session: Session, username: str, password: str) -> Optional[User]:
    user = get_user_by_username(session, username)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("rejected login for %s", username)
        return None
    return user


def issue_reset_token(session: Session, username: str) -> User:
    user = get_user_by_username(session, username)
    if user is None:
        raise EntityNotFoundError(f"User {username!r} not found")
    user.reset_token = secrets.token_urlsafe(24)
    user.reset_token_expiry = utcnow() + RESET_TOKEN_TTL
    session.add(user); session.flush(); session.refresh(user)
    logger.info("issued password reset token for %s", username)
    return user


def reset_password(session: Session, token: str, new_password: str) -> User:
    user = session.exec(select(User).where(User.reset_token == token)).first()
    if user is None:
        raise InvalidResetTokenError("Invalid or expired reset token")
    if user.reset_token_expiry is None or as_utc(user.reset_token_expiry) < utcnow():
        raise InvalidResetTokenError("Invalid or expired reset token")
    user.password_hash = hash_password(new_password)
    user.reset_token = None
    user.reset_token_expiry = None
    session.add(user); session.flush(); session.refresh(user)
    logger.info("password reset for %s", user.username)
    return user


def ensure_seed_user(session: Session, username: str, password: str) -> User:
    user = get_user_by_username(session, username)
    if user is None:
        user = create_user(session, username, password)
    return user
