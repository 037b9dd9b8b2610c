"""
AccountLockout Entity

Persisted lock placed on an account after repeated failed logins.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class AccountLockout(SQLModel, table=True):
    """
    AccountLockout entity - survives restarts, unlike rate-limit counters.

    Business Rules:
    - A lock only denies login while locked_until is in the future
    - Successful login, password reset or admin unlock deactivates it
    """

    __tablename__ = "account_lockouts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    reason: Optional[str] = Field(default=None, max_length=100)
    is_active: bool = Field(default=True)

    # Timestamps
    locked_until: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_lockout_user_active", "user_id", "is_active"),)
