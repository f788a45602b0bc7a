# storefront/auth/service.py

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from uuid import UUID
import secrets
import logging

from sqlalchemy.orm import Session

from ..core.config import settings
from ..schemas.auth import SignupForm
from ..users.models import User
from ..utils.password_utils import verify_password, get_password_hash

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticates a user with email and password."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.info(f"Failed login attempt for {email}")
        return None
    return user


def register_user(db: Session, form: SignupForm) -> Optional[User]:
    """Create an account. Returns None when the email is already registered."""
    if get_user_by_email(db, form.email):
        logger.info(f"Signup attempted with registered email {form.email}")
        return None

    user = User(
        name=form.name,
        email=form.email,
        password_hash=get_password_hash(form.password),
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except Exception as e:
        logger.error(f"Registration failed for {form.email}: {e}")
        db.rollback()
        raise

    logger.info(f"Successfully registered user: {user.email}")
    return user


def create_password_reset_token(db: Session, email: str) -> Optional[Tuple[User, str]]:
    """
    Store a fresh single-use reset token on the user, valid for
    RESET_TOKEN_EXPIRE_MINUTES. Returns None for unknown emails.
    """
    user = get_user_by_email(db, email)
    if not user:
        logger.info(f"Password reset requested for non-existent email: {email}")
        return None

    token = secrets.token_hex(RESET_TOKEN_BYTES)
    user.reset_token = token
    user.reset_token_expiration = _utcnow() + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    try:
        db.commit()
    except Exception as e:
        logger.error(f"Error storing reset token for {email}: {e}")
        db.rollback()
        raise

    logger.info(f"Password reset requested for: {email}")
    return user, token


def get_user_by_reset_token(db: Session, token: str, user_id: Optional[UUID] = None) -> Optional[User]:
    """The user holding an unexpired reset token, optionally pinned to ``user_id``."""
    query = db.query(User).filter(
        User.reset_token == token,
        User.reset_token_expiration > _utcnow(),
    )
    if user_id is not None:
        query = query.filter(User.id == user_id)
    return query.first()


def reset_password(db: Session, user_id: UUID, token: str, new_password: str) -> bool:
    """Resets user password using reset token. The token is consumed."""
    user = get_user_by_reset_token(db, token, user_id)
    if not user:
        logger.warning(f"Invalid or expired reset token used for user {user_id}")
        return False

    user.password_hash = get_password_hash(new_password)
    user.reset_token = None
    user.reset_token_expiration = None
    try:
        db.commit()
    except Exception as e:
        logger.error(f"Error resetting password for user {user_id}: {e}")
        db.rollback()
        raise

    logger.info(f"Password reset for user {user.email}")
    return True
