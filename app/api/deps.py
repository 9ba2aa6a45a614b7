import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.enums import UserRole
from app.core.errors import Forbidden, RateLimited, Unauthenticated
from app.core.rate_limit import auth_limiter, chat_limiter
from app.core.security import decode_access_token
from app.db.models.user import User
from app.db.session import SessionLocal

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _resolve_user(db: Session, credentials: Optional[HTTPAuthorizationCredentials]) -> User:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Not authorized, no token")
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise Unauthenticated("Not authorized, token failed")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise Unauthenticated("Not authorized, token failed")

    user = db.get(User, user_id)
    if user is None:
        raise Unauthenticated("User not found")
    if not user.is_active:
        raise Unauthenticated("Your account has been deactivated")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    return _resolve_user(db, credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    if credentials is None:
        return None
    try:
        return _resolve_user(db, credentials)
    except Unauthenticated:
        return None


def require_role(*roles: UserRole):
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise Forbidden(f"User role {current_user.role.value} is not authorized to access this route")
        return current_user

    return checker


require_teacher = require_role(UserRole.TEACHER)
require_student = require_role(UserRole.STUDENT)


@dataclass
class PageParams:
    page: int
    limit: int


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
) -> PageParams:
    return PageParams(page=page, limit=min(limit, settings.MAX_PAGE_SIZE))


def rate_limit(request: Request) -> None:
    host = request.client.host if request.client else "unknown"
    key = f"{host}:{request.url.path}"
    if not auth_limiter.check_and_consume(key):
        logger.warning("Rate limit exceeded for %s", key)
        raise RateLimited()


def chat_rate_limit(current_user: User = Depends(get_current_user)) -> None:
    key = f"user:{current_user.id}"
    if not chat_limiter.check_and_consume(key):
        logger.warning("Chat rate limit exceeded for %s", key)
        raise RateLimited()
