"""
Escalation Controllers (API Routes)
===================================

FastAPI routes for the admin escalation queue.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import EscalationStatus, settings
from src.core import InvalidStatusTransitionException, ResourceNotFoundException
from src.escalation.application import (
    AssignEscalationRequest,
    CloseEscalationRequest,
    CreateEscalationRequest,
    EscalationListResponse,
    EscalationResponse,
    EscalationService,
    ResolveEscalationRequest,
)
from src.escalation.application.dto import EscalationStatusStr
from src.escalation.domain import Escalation
from src.escalation.infrastructure import SQLAlchemyEscalationRepository
from src.infrastructure.database import get_session
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/escalations", tags=["Escalations"])


ESCALATION_RESPONSE_EXAMPLE = {
    "id": "123e4567-e89b-12d3-a456-426614174000",
    "query": "Why is my scooter showing a BMS error?",
    "priority": "medium",
    "status": "pending",
    "user_id": "user-42",
    "conversation_id": "conv-7",
    "assigned_admin_id": None,
    "admin_notes": None,
    "resolution": None,
    "escalated_at": "2024-01-15T10:00:00Z",
    "updated_at": None,
    "resolved_at": None
}


# ========== Dependencies ==========

async def get_escalation_service(
    session: AsyncSession = Depends(get_session)
) -> EscalationService:
    """Get escalation service instance."""
    return EscalationService(
        SQLAlchemyEscalationRepository(session),
        settings.escalation_default_priority,
    )


async def _apply(action, correlation_id: str) -> Escalation:
    """Run a lifecycle action and map domain errors to HTTP errors."""
    try:
        return await action()
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except InvalidStatusTransitionException as e:
        logger.warning(
            "Escalation transition refused",
            extra={"correlation_id": correlation_id, **e.details}
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


# ========== Route Handlers ==========

@router.post(
    "",
    response_model=EscalationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Escalate a query to human support",
    description="""
    Open a `pending` escalation for a query the customer wants a human to
    answer. Priority defaults to `medium`.

    **Priorities**: `low`, `medium`, `high`, `critical`
    """,
    responses={
        201: {
            "description": "Escalation created",
            "content": {
                "application/json": {
                    "example": ESCALATION_RESPONSE_EXAMPLE
                }
            }
        }
    }
)
async def create_escalation(
    request: Request,
    payload: CreateEscalationRequest,
    service: EscalationService = Depends(get_escalation_service)
):
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    escalation = await service.create_escalation(
        payload.query,
        priority=payload.priority,
        user_id=payload.user_id,
        conversation_id=payload.conversation_id,
    )

    logger.info(
        "Manual escalation created",
        extra={"correlation_id": correlation_id, "escalation_id": escalation.id}
    )

    return EscalationResponse.from_domain(escalation)


@router.get(
    "",
    response_model=EscalationListResponse,
    summary="List escalations",
    description="List escalations newest first, optionally filtered by status or customer."
)
async def list_escalations(
    status_filter: Optional[EscalationStatusStr] = Query(None, alias="status"),
    user_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: EscalationService = Depends(get_escalation_service)
):
    escalations = await service.list_escalations(
        status=EscalationStatus(status_filter) if status_filter else None,
        user_id=user_id,
        limit=limit,
        offset=offset,
    )

    return EscalationListResponse(
        escalations=[EscalationResponse.from_domain(e) for e in escalations],
        total_count=len(escalations)
    )


@router.get(
    "/{escalation_id}",
    response_model=EscalationResponse,
    summary="Get an escalation",
    responses={404: {"description": "Escalation not found"}}
)
async def get_escalation(
    request: Request,
    escalation_id: str,
    service: EscalationService = Depends(get_escalation_service)
):
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    escalation = await _apply(
        lambda: service.get_escalation(escalation_id),
        correlation_id,
    )
    return EscalationResponse.from_domain(escalation)


@router.post(
    "/{escalation_id}/assign",
    response_model=EscalationResponse,
    summary="Assign an escalation to an admin",
    description="Moves a `pending` escalation to `in_progress`.",
    responses={
        404: {"description": "Escalation not found"},
        409: {"description": "Escalation is not pending"}
    }
)
async def assign_escalation(
    request: Request,
    escalation_id: str,
    payload: AssignEscalationRequest,
    service: EscalationService = Depends(get_escalation_service)
):
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    escalation = await _apply(
        lambda: service.assign(escalation_id, payload.admin_id),
        correlation_id,
    )
    return EscalationResponse.from_domain(escalation)


@router.post(
    "/{escalation_id}/resolve",
    response_model=EscalationResponse,
    summary="Resolve an escalation",
    description="Moves an `in_progress` escalation to `resolved` and records the answer.",
    responses={
        404: {"description": "Escalation not found"},
        409: {"description": "Escalation is not in progress"}
    }
)
async def resolve_escalation(
    request: Request,
    escalation_id: str,
    payload: ResolveEscalationRequest,
    service: EscalationService = Depends(get_escalation_service)
):
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    escalation = await _apply(
        lambda: service.resolve(escalation_id, payload.resolution, payload.admin_notes),
        correlation_id,
    )
    return EscalationResponse.from_domain(escalation)


@router.post(
    "/{escalation_id}/close",
    response_model=EscalationResponse,
    summary="Close an escalation",
    description="Closes an escalation from any status except `closed`.",
    responses={
        404: {"description": "Escalation not found"},
        409: {"description": "Escalation already closed"}
    }
)
async def close_escalation(
    request: Request,
    escalation_id: str,
    payload: Optional[CloseEscalationRequest] = None,
    service: EscalationService = Depends(get_escalation_service)
):
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    admin_notes = payload.admin_notes if payload else None
    escalation = await _apply(
        lambda: service.close(escalation_id, admin_notes),
        correlation_id,
    )
    return EscalationResponse.from_domain(escalation)


escalation_router = router
