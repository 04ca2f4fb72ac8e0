"""
Escalation Infrastructure Repositories
======================================

SQLAlchemy implementation of the escalation repository.
"""

from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import EscalationStatus
from src.core import RepositoryException
from src.escalation.application import IEscalationRepository
from src.escalation.domain import Escalation
from src.escalation.infrastructure.models import EscalationModel


def _parse_uuid(value: Optional[str]) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


class SQLAlchemyEscalationRepository(IEscalationRepository):
    """SQLAlchemy implementation for escalated queries."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, escalation: Escalation) -> Escalation:
        """Store a new escalation."""
        model = EscalationModel(
            id=uuid4(),
            query=escalation.query,
            user_id=escalation.user_id,
            conversation_id=escalation.conversation_id,
            priority=escalation.priority.value,
            status=escalation.status.value,
            assigned_admin_id=escalation.assigned_admin_id,
            admin_notes=escalation.admin_notes,
            resolution=escalation.resolution,
            escalated_at=escalation.escalated_at,
            created_at=escalation.escalated_at,
            updated_at=escalation.updated_at,
            resolved_at=escalation.resolved_at,
        )

        try:
            self._session.add(model)
            await self._session.flush()
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to create escalation: {e}")

        escalation.id = str(model.id)
        return escalation

    async def get_by_id(self, escalation_id: str) -> Optional[Escalation]:
        """Get escalation by id."""
        model = await self._get_model(escalation_id)
        return self._to_domain(model) if model else None

    async def list(
        self,
        status: Optional[EscalationStatus] = None,
        user_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Escalation]:
        """List escalations, newest first."""
        stmt = select(EscalationModel)

        if status is not None:
            stmt = stmt.where(EscalationModel.status == EscalationStatus(status).value)
        if user_id is not None:
            stmt = stmt.where(EscalationModel.user_id == user_id)

        stmt = stmt.order_by(EscalationModel.escalated_at.desc(), EscalationModel.id)
        stmt = stmt.limit(limit).offset(offset)

        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def update(self, escalation: Escalation) -> Escalation:
        """Persist lifecycle fields of an existing escalation."""
        model = await self._get_model(escalation.id)
        if not model:
            raise RepositoryException(f"Escalation {escalation.id} not found")

        model.priority = escalation.priority.value
        model.status = escalation.status.value
        model.assigned_admin_id = escalation.assigned_admin_id
        model.admin_notes = escalation.admin_notes
        model.resolution = escalation.resolution
        model.updated_at = escalation.updated_at
        model.resolved_at = escalation.resolved_at

        await self._session.flush()

        return self._to_domain(model)

    async def _get_model(self, escalation_id: Optional[str]) -> Optional[EscalationModel]:
        escalation_uuid = _parse_uuid(escalation_id)
        if escalation_uuid is None:
            return None

        stmt = select(EscalationModel).where(EscalationModel.id == escalation_uuid)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: EscalationModel) -> Escalation:
        return Escalation(
            id=str(model.id),
            query=model.query,
            priority=model.priority,
            status=model.status,
            user_id=model.user_id,
            conversation_id=model.conversation_id,
            assigned_admin_id=model.assigned_admin_id,
            admin_notes=model.admin_notes,
            resolution=model.resolution,
            escalated_at=model.escalated_at,
            updated_at=model.updated_at,
            resolved_at=model.resolved_at,
        )
