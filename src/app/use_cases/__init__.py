"""
Use Cases

Organized into domain folders:
- auth/: Authentication, session and password flows
- admin/: Account lock management and security event review
"""

from .auth import (
    SignupUseCase,
    LoginUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
    ValidateSessionUseCase,
    ChangePasswordUseCase,
    RequestPasswordResetUseCase,
    ConfirmPasswordResetUseCase,
)
from .admin import (
    LockAccountUseCase,
    UnlockAccountUseCase,
    GetSecurityEventsUseCase,
)

__all__ = [
    # Auth
    "SignupUseCase",
    "LoginUseCase",
    "LogoutUseCase",
    "RefreshTokenUseCase",
    "ValidateSessionUseCase",
    "ChangePasswordUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    # Admin
    "LockAccountUseCase",
    "UnlockAccountUseCase",
    "GetSecurityEventsUseCase",
]
