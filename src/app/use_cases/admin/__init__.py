"""
Admin Use Cases

Account lock management and security event review.
"""

from .lock_account_use_case import LockAccountUseCase, LockAccountResponse
from .unlock_account_use_case import UnlockAccountUseCase, UnlockAccountResponse
from .get_security_events_use_case import (
    GetSecurityEventsUseCase,
    SecurityEventItem,
    SecurityEventsPage,
)

__all__ = [
    "LockAccountUseCase",
    "LockAccountResponse",
    "UnlockAccountUseCase",
    "UnlockAccountResponse",
    "GetSecurityEventsUseCase",
    "SecurityEventItem",
    "SecurityEventsPage",
]
