"""
Escalation Application Services
===============================

Orchestrates the escalation lifecycle between the domain entity and the
repository.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.config import EscalationPriority, EscalationStatus
from src.core import ResourceNotFoundException
from src.escalation.domain import Escalation
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Repository Interfaces ==========

class IEscalationRepository(ABC):
    """Interface for escalated query data access."""

    @abstractmethod
    async def create(self, escalation: Escalation) -> Escalation:
        """Store a new escalation and return it with its id set."""

    @abstractmethod
    async def get_by_id(self, escalation_id: str) -> Optional[Escalation]:
        """Get escalation by id."""

    @abstractmethod
    async def list(
        self,
        status: Optional[EscalationStatus] = None,
        user_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Escalation]:
        """List escalations, newest first."""

    @abstractmethod
    async def update(self, escalation: Escalation) -> Escalation:
        """Persist lifecycle changes of an existing escalation."""


# ========== Application Services ==========

class EscalationService:
    """
    Service for opening and progressing escalated queries.

    Lifecycle rules live on the Escalation entity; this service loads,
    applies and saves.
    """

    def __init__(
        self,
        repository: IEscalationRepository,
        default_priority: EscalationPriority = EscalationPriority.MEDIUM
    ):
        self._repo = repository
        self._default_priority = EscalationPriority(default_priority)

    async def create_escalation(
        self,
        query_text: str,
        priority: Optional[EscalationPriority] = None,
        user_id: Optional[str] = None,
        conversation_id: Optional[str] = None
    ) -> Escalation:
        """
        Open a pending escalation.

        Args:
            query_text: The customer's unanswered question
            priority: Defaults to the configured default priority
            user_id: Customer who asked, if known
            conversation_id: Chat conversation the query came from

        Returns:
            The stored Escalation
        """
        escalation = Escalation(
            id=None,
            query=query_text,
            priority=priority or self._default_priority,
            user_id=user_id,
            conversation_id=conversation_id,
        )
        created = await self._repo.create(escalation)

        logger.info(
            "Escalation created",
            extra={
                "escalation_id": created.id,
                "priority": created.priority.value,
                "has_user": user_id is not None,
            }
        )
        return created

    async def get_escalation(self, escalation_id: str) -> Escalation:
        """Get one escalation or raise ResourceNotFoundException."""
        escalation = await self._repo.get_by_id(escalation_id)
        if escalation is None:
            raise ResourceNotFoundException("Escalation", escalation_id)
        return escalation

    async def list_escalations(
        self,
        status: Optional[EscalationStatus] = None,
        user_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Escalation]:
        return await self._repo.list(status=status, user_id=user_id, limit=limit, offset=offset)

    async def assign(self, escalation_id: str, admin_id: str) -> Escalation:
        """Move a pending escalation to in_progress under an admin."""
        escalation = await self.get_escalation(escalation_id)
        escalation.assign(admin_id)
        return await self._save(escalation, "assigned")

    async def resolve(
        self,
        escalation_id: str,
        resolution: str,
        admin_notes: Optional[str] = None
    ) -> Escalation:
        """Mark an in-progress escalation resolved with the given answer."""
        escalation = await self.get_escalation(escalation_id)
        escalation.resolve(resolution, admin_notes)
        return await self._save(escalation, "resolved")

    async def close(self, escalation_id: str, admin_notes: Optional[str] = None) -> Escalation:
        escalation = await self.get_escalation(escalation_id)
        escalation.close(admin_notes)
        return await self._save(escalation, "closed")

    async def _save(self, escalation: Escalation, action: str) -> Escalation:
        saved = await self._repo.update(escalation)
        logger.info(
            f"Escalation {action}",
            extra={"escalation_id": saved.id, "status": saved.status.value}
        )
        return saved
