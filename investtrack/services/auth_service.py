import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from investtrack.config import settings
from investtrack.core.exceptions import (
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from investtrack.core.security import (
    check_password_strength,
    create_access_token,
    generate_otp,
    hash_password,
    verify_password,
)
from investtrack.database import atomic
from investtrack.models.base import as_utc, utcnow
from investtrack.models.role import UserRole
from investtrack.models.token import Token
from investtrack.models.user import DEFAULT_AVATAR, User
from investtrack.repositories.token_repository import TokenRepository
from investtrack.repositories.user_repository import UserRepository
from investtrack.schemas.auth_schemas import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserUpdate,
    VerifyOtpRequest,
)
from investtrack.services.notifier import PasswordResetNotifier

logger = logging.getLogger(__name__)

INVALID_OTP = "Invalid or expired OTP"
UNVERIFIED_OTP = "OTP has not been verified"


class AuthService:
    """Registration, login, profile and password management"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.token_repo = TokenRepository(db)

    def register(self, data: RegisterRequest, registered_by: User | None = None) -> User:
        """
        Create a user account.

        The requested role is only honoured when an admin registers the user;
        self-registration always creates a member.

        Raises:
            ValidationException: Password too weak
            DuplicateKeyException: Email already registered
        """
        check_password_strength(data.password)

        role = UserRole.MEMBER
        if registered_by is not None and registered_by.is_admin():
            role = data.role

        user = User(
            name=data.name,
            email=data.email.lower(),
            password_hash=hash_password(data.password),
            role=role,
            avatar=data.avatar or DEFAULT_AVATAR,
        )

        with atomic(self.db):
            self.user_repo.add(user)

        logger.info("Registered user %s <%s> as %s", user.id, user.email, user.role.value)
        return user

    def login(self, data: LoginRequest) -> tuple[User, str]:
        """
        Check credentials and issue an access token.

        Raises:
            UnauthorizedException: Unknown email or wrong password
        """
        user = self.user_repo.get_by_email(data.email)
        if not user or not verify_password(data.password, user.password_hash):
            raise UnauthorizedException("Invalid email or password")

        logger.info("User %s logged in", user.id)
        return user, create_access_token(user.id)

    def update_profile(self, user: User, data: UserUpdate) -> User:
        updates = data.model_dump(exclude_unset=True, exclude_none=True)

        with atomic(self.db):
            for field, value in updates.items():
                setattr(user, field, value)
            self.db.flush()

        return user

    def change_password(self, user: User, data: ChangePasswordRequest) -> None:
        """
        Raises:
            ValidationException: Wrong old password, mismatched confirmation or weak password
        """
        if not verify_password(data.old_password, user.password_hash):
            raise ValidationException(
                "Old password is incorrect",
                fields=[{"field": "old_password", "message": "Old password is incorrect"}],
            )
        if data.password != data.confirm_password:
            raise ValidationException(
                "Passwords do not match",
                fields=[{"field": "confirm_password", "message": "Passwords do not match"}],
            )
        check_password_strength(data.password)

        with atomic(self.db):
            user.password_hash = hash_password(data.password)
            self.db.flush()

        logger.info("User %s changed password", user.id)

    def forgot_password(self, email: str, notifier: PasswordResetNotifier) -> User:
        """
        Issue a one-time reset code and hand it to the notifier.

        Earlier codes of the user are purged, so only the newest one works.

        Raises:
            NotFoundException: No user with that email
        """
        user = self.user_repo.get_by_email(email)
        if not user:
            raise NotFoundException("No user registered with that email")

        code = generate_otp()
        now = utcnow()

        with atomic(self.db):
            self.token_repo.delete_for_user(user.id)
            self.token_repo.add(
                Token(
                    user_id=user.id,
                    token_hash=hash_password(code),
                    created_at=now,
                    expires_at=now + timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES),
                )
            )

        notifier.send_reset_code(user, code)
        logger.info("Issued password reset code for user %s", user.id)
        return user

    def _check_otp(self, user_id: int, otp: str) -> Token:
        token = self.token_repo.get_latest_for_user(user_id)
        if (
            token is None
            or as_utc(token.expires_at) <= utcnow()
            or not verify_password(otp, token.token_hash)
        ):
            raise ValidationException(INVALID_OTP, fields=[{"field": "otp", "message": INVALID_OTP}])
        return token

    def verify_otp(self, data: VerifyOtpRequest) -> None:
        """
        Raises:
            ValidationException: Code missing, expired or wrong
        """
        token = self._check_otp(data.user_id, data.otp)

        with atomic(self.db):
            token.verified = True
            self.db.flush()

    def reset_password(self, data: ResetPasswordRequest, notifier: PasswordResetNotifier) -> None:
        """
        Set a new password with a verified reset code; the code is consumed.

        Raises:
            NotFoundException: Unknown user
            ValidationException: Bad or unverified code, or weak password
        """
        user = self.user_repo.get_by_id(data.user_id)
        if not user:
            raise NotFoundException(f"User {data.user_id} not found")

        token = self._check_otp(user.id, data.otp)
        if not token.verified:
            raise ValidationException(
                UNVERIFIED_OTP, fields=[{"field": "otp", "message": UNVERIFIED_OTP}]
            )
        check_password_strength(data.password)

        with atomic(self.db):
            user.password_hash = hash_password(data.password)
            self.token_repo.delete_for_user(user.id)

        notifier.send_reset_confirmation(user)
        logger.info("User %s reset password", user.id)
