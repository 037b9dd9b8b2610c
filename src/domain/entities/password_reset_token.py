"""
PasswordResetToken Entity

Secure password reset tokens.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class PasswordResetToken(SQLModel, table=True):
    """
    PasswordResetToken entity - secure password reset tokens.

    Business Rules:
    - Expires after PASSWORD_RESET_TTL_MINUTES (default 1 hour)
    - Token is SHA-256 hash of secure random string
    - Single-use: marked as used after confirmation
    """

    __tablename__ = "password_reset_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", index=True)
    token_hash: str = Field(max_length=64)  # SHA-256 output

    used: bool = Field(default=False)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_password_reset_expires_at", "expires_at"),
        Index("idx_password_reset_token_hash", "token_hash"),
    )
