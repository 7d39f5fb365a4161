from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from investtrack.core.exceptions import ForbiddenException, UnauthorizedException
from investtrack.core.security import extract_user_id
from investtrack.database import get_db
from investtrack.models.user import User
from investtrack.repositories.user_repository import UserRepository
from investtrack.services.notifier import LoggingNotifier, PasswordResetNotifier

# auto_error=False: a missing header is reported as 401 by get_current_user
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    FastAPI dependency to validate JWT and load the user.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using SECRET_KEY
    3. Extract the user id from 'sub' claim
    4. Load the User record
    5. Return User object for use in endpoints

    Raises:
        UnauthorizedException: Token missing, invalid or expired, or user gone
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Not authenticated")

    user_id = extract_user_id(credentials.credentials)

    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise UnauthorizedException("User for this token no longer exists")

    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    FastAPI dependency for admin-only endpoints.

    Raises:
        ForbiddenException: Authenticated user is not an admin
    """
    if not current_user.is_admin():
        raise ForbiddenException("Admin privileges required")
    return current_user


def get_notifier() -> PasswordResetNotifier:
    """Password-reset notifier; override in tests or to plug in real mail delivery"""
    return LoggingNotifier()


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User | None:
    """Like get_current_user, but an anonymous caller yields None"""
    if credentials is None or not credentials.credentials:
        return None
    return await get_current_user(credentials, db)
