"""
User Entity

Represents a learner, parent, teacher or administrator account.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import AccountStatus, UserRole


class User(SQLModel, table=True):
    """
    User entity - an account that can authenticate.

    Business Rules:
    - Email and username are unique across all users
    - Password stored as bcrypt hash, never in plaintext
    - failed_attempts only grows on verified wrong passwords and is
      reset to 0 on successful login or password reset
    - Only account_status=active may log in
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    username: Optional[str] = Field(default=None, unique=True, index=True, max_length=64)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)

    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    role: UserRole = Field(default=UserRole.student)
    account_status: AccountStatus = Field(default=AccountStatus.active)
    email_verified: bool = Field(default=False)
    two_factor_enabled: bool = Field(default=False)

    failed_attempts: int = Field(default=0)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_login: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_account_status", "account_status"),)
