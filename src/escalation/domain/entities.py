"""
Escalation Domain Entities
==========================

A customer query handed over to human support, with its lifecycle:

    pending -> in_progress -> resolved
    (any non-closed status) -> closed
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Optional

from src.config import EscalationPriority, EscalationStatus
from src.core import InvalidStatusTransitionException


ALLOWED_TRANSITIONS: Dict[EscalationStatus, FrozenSet[EscalationStatus]] = {
    EscalationStatus.PENDING: frozenset({EscalationStatus.IN_PROGRESS, EscalationStatus.CLOSED}),
    EscalationStatus.IN_PROGRESS: frozenset({EscalationStatus.RESOLVED, EscalationStatus.CLOSED}),
    EscalationStatus.RESOLVED: frozenset({EscalationStatus.CLOSED}),
    EscalationStatus.CLOSED: frozenset(),
}


@dataclass
class Escalation:
    """
    Escalated query entity.

    Created in `pending` when the FAQ corpus cannot answer a question or the
    customer asks for a human. Status changes go through the methods below,
    which refuse transitions outside ALLOWED_TRANSITIONS.
    """

    id: Optional[str]
    query: str
    priority: EscalationPriority = EscalationPriority.MEDIUM
    status: EscalationStatus = EscalationStatus.PENDING
    user_id: Optional[str] = None
    conversation_id: Optional[str] = None
    assigned_admin_id: Optional[str] = None
    admin_notes: Optional[str] = None
    resolution: Optional[str] = None
    escalated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate escalation on initialization."""
        if not self.query or not self.query.strip():
            raise ValueError("Escalated query text cannot be empty")
        self.priority = EscalationPriority(self.priority)
        self.status = EscalationStatus(self.status)

    @property
    def is_open(self) -> bool:
        return self.status in (EscalationStatus.PENDING, EscalationStatus.IN_PROGRESS)

    def can_transition_to(self, target: EscalationStatus) -> bool:
        return EscalationStatus(target) in ALLOWED_TRANSITIONS[self.status]

    def _transition(self, target: EscalationStatus, timestamp: Optional[datetime]) -> datetime:
        target = EscalationStatus(target)
        if not self.can_transition_to(target):
            raise InvalidStatusTransitionException(
                escalation_id=str(self.id),
                current_status=self.status.value,
                target_status=target.value,
            )
        now = timestamp or datetime.now(timezone.utc)
        self.status = target
        self.updated_at = now
        return now

    def assign(self, admin_id: str, timestamp: Optional[datetime] = None) -> None:
        """Hand the query to an admin and start working on it."""
        if not admin_id:
            raise ValueError("admin_id is required")
        self._transition(EscalationStatus.IN_PROGRESS, timestamp)
        self.assigned_admin_id = admin_id

    def resolve(
        self,
        resolution: str,
        admin_notes: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ) -> None:
        """Record the answer given to the customer."""
        if not resolution or not resolution.strip():
            raise ValueError("resolution cannot be empty")
        self.resolved_at = self._transition(EscalationStatus.RESOLVED, timestamp)
        self.resolution = resolution
        if admin_notes is not None:
            self.admin_notes = admin_notes

    def close(self, admin_notes: Optional[str] = None, timestamp: Optional[datetime] = None) -> None:
        """Close the escalation from any open or resolved status."""
        self._transition(EscalationStatus.CLOSED, timestamp)
        if admin_notes is not None:
            self.admin_notes = admin_notes
