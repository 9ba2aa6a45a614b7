import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.enums import UserRole
from app.core.errors import Conflict, NotFound, Unauthenticated, ValidationError
from app.core.security import get_password_hash, verify_password
from app.core.timeutils import utcnow
from app.db.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_id(db: Session, user_id: int):
    return db.get(User, user_id)


def get_active_teacher(db: Session, user_id: int):
    user = get_user_by_id(db, user_id)
    if user is None or not user.is_active or user.role != UserRole.TEACHER:
        return None
    return user


def _check_password_strength(password: str):
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
        )


def create_user(db: Session, user_data) -> User:
    _check_password_strength(user_data.password)
    if get_user_by_email(db, user_data.email):
        raise Conflict("User already exists with this email")

    db_user = User(
        email=normalize_email(user_data.email),
        hashed_password=get_password_hash(user_data.password),
        full_name=user_data.full_name.strip(),
        role=user_data.role,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("User already exists with this email")
    db.refresh(db_user)
    logger.info("Registered %s user id=%s", db_user.role.value, db_user.id)
    return db_user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        logger.warning("Failed login for %s", normalize_email(email))
        raise Unauthenticated("Invalid email or password")
    if not user.is_active:
        raise Unauthenticated("Your account has been deactivated")

    user.last_login = utcnow()
    db.commit()
    db.refresh(user)
    return user


def update_profile(db: Session, user: User, profile_data) -> User:
    changes = profile_data.model_dump(exclude_unset=True)
    if "full_name" in changes and changes["full_name"] is None:
        raise ValidationError("Full name cannot be empty")
    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.hashed_password):
        raise ValidationError("Current password is incorrect")
    _check_password_strength(new_password)
    user.hashed_password = get_password_hash(new_password)
    db.commit()
    logger.info("Password changed for user id=%s", user.id)


def deactivate_user(db: Session, user: User) -> None:
    user.is_active = False
    db.commit()
    logger.info("Deactivated user id=%s", user.id)


def get_user_or_404(db: Session, user_id: int) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return user
