"""
Tutor Auth Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserRole(str, Enum):
    """Platform role of a user"""

    admin = "admin"
    student = "student"
    parent = "parent"
    teacher = "teacher"


class AccountStatus(str, Enum):
    """Account status - only active accounts may log in"""

    active = "active"
    inactive = "inactive"
    suspended = "suspended"
    pending_verification = "pending_verification"


class LoginMethod(str, Enum):
    """How a session was established"""

    password = "password"
    refresh = "refresh"


class RiskLevel(str, Enum):
    """Risk classification of a security event"""

    low = "low"
    medium = "medium"
    high = "high"


class EventCategory(str, Enum):
    """Coarse grouping of security events"""

    authentication = "authentication"
    session = "session"
    account = "account"
    security = "security"


class SecurityEventType(str, Enum):
    """Security event types written to the audit trail"""

    account_creation = "account_creation"
    login_success = "login_success"
    login_failure = "login_failure"
    two_factor_required = "two_factor_required"
    logout = "logout"
    token_refresh = "token_refresh"
    account_locked = "account_locked"
    account_unlocked = "account_unlocked"
    password_change = "password_change"
    password_reset_requested = "password_reset_requested"
    password_reset = "password_reset"
    internal_error = "internal_error"


class AuthErrorCode(str, Enum):
    """Stable error classification returned by the auth core"""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    ACCOUNT_INACTIVE = "ACCOUNT_INACTIVE"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    WRONG_TOKEN_TYPE = "WRONG_TOKEN_TYPE"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    CSRF_INVALID = "CSRF_INVALID"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    USERNAME_ALREADY_EXISTS = "USERNAME_ALREADY_EXISTS"
    TOKEN_ALREADY_USED = "TOKEN_ALREADY_USED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_API_KEY = "INVALID_API_KEY"

    def __str__(self) -> str:
        return self.value
