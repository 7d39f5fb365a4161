from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from investtrack.models.role import UserRole


class RegisterRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    role: UserRole = UserRole.MEMBER
    avatar: str | None = Field(None, max_length=1024)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Public view of a user; never includes the password hash"""

    model_config = {"from_attributes": True}

    id: int
    email: str
    name: str
    role: UserRole
    avatar: str
    firm_ids: list[int]
    created_at: datetime


class UserUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=255)
    avatar: str | None = Field(None, max_length=1024)


class TokenResponse(BaseModel):
    success: bool = True
    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1, max_length=128)
    confirm_password: str = Field(..., min_length=1, max_length=128)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class VerifyOtpRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    otp: str = Field(..., pattern=r"^[0-9]{6}$")


class ResetPasswordRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    otp: str = Field(..., pattern=r"^[0-9]{6}$")
    password: str = Field(..., min_length=1, max_length=128)


class ForgotPasswordResponse(BaseModel):
    success: bool = True
    message: str
    user_id: int
