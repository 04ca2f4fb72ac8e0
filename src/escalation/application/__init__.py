"""
Escalation Application Layer
============================

Contains:
- Services: EscalationService
- DTOs: Data transfer objects for API serialization
"""

from src.escalation.application.dto import (
    CreateEscalationRequest,
    AssignEscalationRequest,
    ResolveEscalationRequest,
    CloseEscalationRequest,
    EscalationResponse,
    EscalationListResponse,
)
from src.escalation.application.services import (
    EscalationService,
    IEscalationRepository,
)

__all__ = [
    # DTOs
    "CreateEscalationRequest",
    "AssignEscalationRequest",
    "ResolveEscalationRequest",
    "CloseEscalationRequest",
    "EscalationResponse",
    "EscalationListResponse",
    # Services
    "EscalationService",
    # Repository Interfaces
    "IEscalationRepository",
]
