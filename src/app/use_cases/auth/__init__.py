"""
Authentication Use Cases

All authentication-related business logic.
"""

from .signup_use_case import SignupUseCase
from .login_use_case import LoginUseCase
from .logout_use_case import LogoutUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .validate_session_use_case import ValidateSessionUseCase
from .change_password_use_case import ChangePasswordUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .purge_expired_sessions_use_case import PurgeExpiredSessionsUseCase
from .dtos import (
    LoginCommand,
    SignupCommand,
    ChangePasswordCommand,
    UserProfile,
    SessionInfo,
    LoginResponse,
    RefreshTokenResponse,
    LogoutResponse,
    SessionValidationResponse,
    SignupResponse,
    ChangePasswordResponse,
    RequestPasswordResetResponse,
    ConfirmPasswordResetResponse,
    PasswordStrengthResponse,
)

__all__ = [
    # Use Cases
    "SignupUseCase",
    "LoginUseCase",
    "LogoutUseCase",
    "RefreshTokenUseCase",
    "ValidateSessionUseCase",
    "ChangePasswordUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    "PurgeExpiredSessionsUseCase",
    # DTOs - Commands
    "LoginCommand",
    "SignupCommand",
    "ChangePasswordCommand",
    # DTOs - Responses
    "LoginResponse",
    "RefreshTokenResponse",
    "LogoutResponse",
    "SessionValidationResponse",
    "SignupResponse",
    "ChangePasswordResponse",
    "RequestPasswordResetResponse",
    "ConfirmPasswordResetResponse",
    "PasswordStrengthResponse",
    # DTOs - Nested Models
    "UserProfile",
    "SessionInfo",
]
