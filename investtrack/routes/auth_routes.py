from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from investtrack.database import get_db
from investtrack.dependencies import get_current_user, get_notifier, get_optional_user
from investtrack.models.user import User
from investtrack.schemas.auth_schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
    VerifyOtpRequest,
)
from investtrack.schemas.common_schemas import MessageResponse
from investtrack.services.auth_service import AuthService
from investtrack.services.notifier import PasswordResetNotifier

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    Register a new user.

    - Email is stored lower-cased and must be unique (409 otherwise)
    - Password must satisfy the password policy
    - role is only honoured when an admin makes the call; otherwise member
    """
    return AuthService(db).register(data, registered_by=current_user)


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """
    Exchange email and password for a bearer token.

    - Token is valid for ACCESS_TOKEN_EXPIRE_DAYS days
    - Returns 401 on bad credentials
    """
    user, token = AuthService(db).login(data)
    return TokenResponse(
        message="Logged in successfully",
        access_token=token,
        user=UserResponse.model_validate(user),
    )


@router.get("/logout", response_model=MessageResponse)
def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards its token"""
    return MessageResponse(message="Logged out successfully")


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Change own password.

    - old_password must match
    - password and confirm_password must match and satisfy the password policy
    """
    AuthService(db).change_password(current_user, data)
    return MessageResponse(message="Password changed successfully")


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
def forgot_password(
    data: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    notifier: PasswordResetNotifier = Depends(get_notifier),
):
    """
    Issue a 6-digit reset code to the user.

    - Any earlier code is invalidated
    - Code expires after RESET_TOKEN_TTL_MINUTES
    """
    user = AuthService(db).forgot_password(data.email, notifier)
    return ForgotPasswordResponse(message="Password reset code sent", user_id=user.id)


@router.post("/verify-otp", response_model=MessageResponse)
def verify_otp(data: VerifyOtpRequest, db: Session = Depends(get_db)):
    """Check a reset code without consuming it"""
    AuthService(db).verify_otp(data)
    return MessageResponse(message="OTP verified")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    data: ResetPasswordRequest,
    db: Session = Depends(get_db),
    notifier: PasswordResetNotifier = Depends(get_notifier),
):
    """Set a new password using a valid reset code"""
    AuthService(db).reset_password(data, notifier)
    return MessageResponse(message="Password reset successfully")
