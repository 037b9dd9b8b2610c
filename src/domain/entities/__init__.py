"""
Tutor Auth Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    UserRole,
    AccountStatus,
    LoginMethod,
    RiskLevel,
    EventCategory,
    SecurityEventType,
    AuthErrorCode,
)

# Export all entities
from .user import User
from .session import Session
from .account_lockout import AccountLockout
from .security_event import SecurityEvent
from .password_reset_token import PasswordResetToken

__all__ = [
    # Enums
    "UserRole",
    "AccountStatus",
    "LoginMethod",
    "RiskLevel",
    "EventCategory",
    "SecurityEventType",
    "AuthErrorCode",
    # Entities
    "User",
    "Session",
    "AccountLockout",
    "SecurityEvent",
    "PasswordResetToken",
]
