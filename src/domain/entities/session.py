"""
Session Entity

Server-side record binding a user to an active login.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import LoginMethod


class Session(SQLModel, table=True):
    """
    Session entity - one row per active login.

    Business Rules:
    - Session, access and refresh tokens are stored as SHA-256 digests
    - expires_at is fixed at creation and never extended
    - Refresh rotates: a new session is created, this one is deactivated
    - Several concurrent sessions per user are allowed unless capped
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    session_token_hash: str = Field(max_length=64, unique=True)
    access_token_hash: str = Field(max_length=64, index=True)
    refresh_token_hash: str = Field(max_length=64, unique=True)

    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)
    login_method: LoginMethod = Field(default=LoginMethod.password)
    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_accessed: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_active", "user_id", "is_active"),
    )
