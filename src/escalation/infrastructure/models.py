"""
Escalation Infrastructure Models
================================

SQLAlchemy ORM models for the escalation module.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.config import EscalationPriority, EscalationStatus
from src.infrastructure.database import Base


class EscalationModel(Base):
    """
    Database model for the Escalation entity.

    Stores queries handed to human support and their lifecycle.
    """
    __tablename__ = "escalated_queries"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Query and origin
    query: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(String(255), index=True, nullable=True)
    conversation_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Lifecycle
    priority: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EscalationPriority.MEDIUM.value
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True, default=EscalationStatus.PENDING.value
    )
    assigned_admin_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolution: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Timestamps
    escalated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
