import re
import secrets
from datetime import datetime, timedelta, UTC

import bcrypt
from jose import JWTError, jwt

from investtrack.config import settings
from investtrack.core.exceptions import UnauthorizedException, ValidationException

PASSWORD_POLICY = re.compile(r"(?=.*?[A-Z])(?=.*?[a-z])(?=.*?[0-9])(?=.*?[@$!%*#?~(&)+=^_-]).{8,}")
PASSWORD_POLICY_MESSAGE = (
    "Password must contain at least one uppercase letter, one lowercase letter, "
    "one number, one special character and must be at least 8 characters long"
)


def hash_password(password: str) -> str:
    """Hash password (or one-time code) with bcrypt."""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


def check_password_strength(password: str) -> None:
    if not PASSWORD_POLICY.match(password):
        raise ValidationException(
            PASSWORD_POLICY_MESSAGE,
            fields=[{"field": "password", "message": PASSWORD_POLICY_MESSAGE}],
        )


def generate_otp() -> str:
    """Six-digit one-time code for password recovery."""
    return f"{secrets.randbelow(1_000_000):06d}"


def create_access_token(user_id: int) -> str:
    """
    Issue a signed access token for a user.

    The 'sub' claim carries the user id as a string, 'exp' is
    ACCESS_TOKEN_EXPIRE_DAYS from now.
    """
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token using SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (user_id), 'exp', etc.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])

        # Validate expiration (jose checks this automatically)
        exp = payload.get("exp")
        if exp is None:
            raise UnauthorizedException("Token missing expiration")

        # Extract user_id from 'sub' claim
        user_id: str = payload.get("sub")
        if user_id is None:
            raise UnauthorizedException("Token missing user identifier")

        return payload

    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")


def extract_user_id(token: str) -> int:
    """Extract the numeric user id from JWT token"""
    payload = decode_jwt(token)
    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedException("Token carries a malformed user identifier")
