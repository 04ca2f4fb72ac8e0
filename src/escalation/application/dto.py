"""
Escalation Application DTOs
===========================

Pydantic models for escalation request/response validation.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from src.config import VALID_ESCALATION_PRIORITIES, VALID_ESCALATION_STATUSES
from src.escalation.domain import Escalation


# ========== Type Aliases for Literals ==========
EscalationPriorityStr = Literal[tuple(VALID_ESCALATION_PRIORITIES)]
EscalationStatusStr = Literal[tuple(VALID_ESCALATION_STATUSES)]


# ========== Request DTOs ==========

class CreateEscalationRequest(BaseModel):
    """Request model for a manual escalation."""
    query: str = Field(..., min_length=1, description="Customer query to hand over")
    priority: Optional[EscalationPriorityStr] = Field(None, description="Defaults to medium")
    user_id: Optional[str] = Field(None, description="Customer ID")
    conversation_id: Optional[str] = Field(None, description="Chat conversation ID")

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Reject whitespace-only and oversized queries."""
        if not v.strip():
            raise ValueError("Query cannot be blank")
        if len(v) > 2000:
            raise ValueError("Query too long (max 2000 characters)")
        return v


class AssignEscalationRequest(BaseModel):
    admin_id: str = Field(..., min_length=1, description="Admin taking the query")


class ResolveEscalationRequest(BaseModel):
    resolution: str = Field(..., min_length=1, description="Answer given to the customer")
    admin_notes: Optional[str] = Field(None, description="Internal notes")


class CloseEscalationRequest(BaseModel):
    admin_notes: Optional[str] = Field(None, description="Internal notes")


# ========== Response DTOs ==========

class EscalationResponse(BaseModel):
    """One escalated query."""
    id: str
    query: str
    priority: EscalationPriorityStr
    status: EscalationStatusStr
    user_id: Optional[str] = None
    conversation_id: Optional[str] = None
    assigned_admin_id: Optional[str] = None
    admin_notes: Optional[str] = None
    resolution: Optional[str] = None
    escalated_at: datetime
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, escalation: Escalation) -> "EscalationResponse":
        """Create from domain entity."""
        return cls(
            id=str(escalation.id),
            query=escalation.query,
            priority=escalation.priority.value,
            status=escalation.status.value,
            user_id=escalation.user_id,
            conversation_id=escalation.conversation_id,
            assigned_admin_id=escalation.assigned_admin_id,
            admin_notes=escalation.admin_notes,
            resolution=escalation.resolution,
            escalated_at=escalation.escalated_at,
            updated_at=escalation.updated_at,
            resolved_at=escalation.resolved_at,
        )


class EscalationListResponse(BaseModel):
    escalations: List[EscalationResponse]
    total_count: int
