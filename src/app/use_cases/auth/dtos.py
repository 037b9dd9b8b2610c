"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.domain.entities import User, UserRole


# ============================================================================
# Command DTOs
# ============================================================================


class LoginCommand(BaseModel):
    """Login intent: email or username plus password, optionally the expected role"""

    identifier: str
    password: str
    role: Optional[UserRole] = None
    remember_me: bool = False


class SignupCommand(BaseModel):
    email: str
    password: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole = UserRole.student


class ChangePasswordCommand(BaseModel):
    current_password: str
    new_password: str


# ============================================================================
# Response DTOs
# ============================================================================


class UserProfile(BaseModel):
    """Public view of a user - never includes the password hash"""

    id: str
    email: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    account_status: str
    email_verified: bool
    two_factor_enabled: bool
    last_login: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            id=str(user.id),
            email=user.email,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role.value,
            account_status=user.account_status.value,
            email_verified=user.email_verified,
            two_factor_enabled=user.two_factor_enabled,
            last_login=user.last_login,
        )


class SessionInfo(BaseModel):
    id: str
    login_method: str
    created_at: datetime
    last_accessed: datetime
    expires_at: datetime


class LoginResponse(BaseModel):
    """Response for user login use case. Tokens are absent when a second factor is required."""

    success: bool = True
    requires_two_factor: bool = False
    user: UserProfile
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    session_token: Optional[str] = None
    csrf_token: Optional[str] = None
    session_id: Optional[str] = None
    expires_in: Optional[int] = None
    session_expires_at: Optional[datetime] = None


class RefreshTokenResponse(BaseModel):
    """Response for refresh token use case"""

    access_token: str
    refresh_token: str
    session_token: str
    csrf_token: str
    session_id: str
    expires_in: int
    session_expires_at: datetime
    user: UserProfile


class LogoutResponse(BaseModel):
    success: bool
    message: str


class SessionValidationResponse(BaseModel):
    valid: bool
    user: Optional[UserProfile] = None
    session: Optional[SessionInfo] = None


class SignupResponse(BaseModel):
    user: UserProfile


class ChangePasswordResponse(BaseModel):
    status: str
    message: str
    sessions_revoked: int


class RequestPasswordResetResponse(BaseModel):
    """Response for request password reset use case"""

    status: str
    message: str


class ConfirmPasswordResetResponse(BaseModel):
    """Response for confirm password reset use case"""

    status: str
    message: str
    sessions_revoked: int = 0


class PasswordStrengthResponse(BaseModel):
    is_valid: bool
    score: int
    feedback: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
