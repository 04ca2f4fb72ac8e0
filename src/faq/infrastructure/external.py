"""
FAQ External Service Adapters
=============================

Adapters for services owned by other bounded contexts.
"""

from typing import Optional

from src.config import EscalationPriority
from src.escalation.application import EscalationService
from src.faq.application import IEscalationSink


class EscalationSinkAdapter(IEscalationSink):
    """
    Adapter that wraps the escalation module's service.

    Implements the FAQ application's IEscalationSink port so chat
    resolution can open escalations without depending on escalation
    internals.
    """

    def __init__(self, escalation_service: EscalationService):
        self._service = escalation_service

    async def create_escalation(
        self,
        query_text: str,
        priority: EscalationPriority,
        user_id: Optional[str] = None,
        conversation_id: Optional[str] = None
    ) -> str:
        """Create a pending escalation and return its id."""
        escalation = await self._service.create_escalation(
            query_text,
            priority=priority,
            user_id=user_id,
            conversation_id=conversation_id,
        )
        return str(escalation.id)
