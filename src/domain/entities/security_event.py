"""
SecurityEvent Entity

Immutable log of authentication and account security events.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import EventCategory, RiskLevel, SecurityEventType


class SecurityEvent(SQLModel, table=True):
    """
    SecurityEvent entity - append-only audit trail.

    Business Rules:
    - Never updated or deleted
    - user_id is null when the identifier did not resolve to an account
    - Metadata stores extra context (identifier, reason, session ids)
    """

    __tablename__ = "security_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: Optional[UUID] = Field(default=None, index=True)
    session_id: Optional[UUID] = Field(default=None)

    event_type: SecurityEventType
    event_category: EventCategory = Field(default=EventCategory.authentication)
    description: str = Field(default="", max_length=500)
    risk_level: RiskLevel = Field(default=RiskLevel.low)
    success: bool = Field(default=False)

    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_security_event_created_at", "created_at"),
        Index("idx_security_event_user_type", "user_id", "event_type"),
    )
