"""
FAQ Controllers (API Routes)
============================

FastAPI routes for FAQ matching, browsing, feedback and chat resolution.

Controllers are thin - they delegate to application services.
"""

import time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query as QueryParam, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import FAQCategory, settings
from src.core import (
    CorpusUnavailableException,
    FeedbackWriteException,
    ResourceNotFoundException,
)
from src.escalation.application import EscalationService
from src.escalation.infrastructure import SQLAlchemyEscalationRepository
from src.faq.application import (
    BrowseResponse,
    ChatResolutionService,
    FAQEntryInfo,
    FAQMatchingService,
    FeedbackResponse,
    FeedbackService,
    MatchRequest,
    MatchResponse,
    RatingRequest,
    ResolveRequest,
    ResolveResponse,
    SERVICE_UNAVAILABLE_MESSAGE,
)
from src.faq.application.dto import FAQCategoryStr, ScooterModelStr
from src.faq.domain import FAQMatcher, FAQRanker, Query
from src.faq.infrastructure import (
    EscalationSinkAdapter,
    SQLAlchemyFAQRepository,
    SQLAlchemySettingsRepository,
)
from src.infrastructure.database import get_session
from src.shared.infrastructure.logging import get_context_logger, get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/faq", tags=["FAQ"])


# ========== Example payloads for Swagger ==========

MATCH_RESPONSE_EXAMPLE = {
    "query": "How long does it take to charge my scooter?",
    "threshold": 0.15,
    "escalate": False,
    "timed_out": False,
    "matches": [
        {
            "rank": 1,
            "similarity_score": 0.62,
            "faq": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "question": "How long does it take to charge my scooter?",
                "answer": "A full charge at home takes about 5 hours 40 minutes.",
                "category": "charging",
                "scooter_models": ["450X"],
                "tags": ["charging", "time"],
                "view_count": 120,
                "helpful_count": 48,
                "not_helpful_count": 3,
                "helpfulness_ratio": 0.9412,
                "updated_at": None
            }
        }
    ],
    "processing_time_ms": 12
}

RESOLVE_RESPONSE_EXAMPLE = {
    "response": "A full charge at home takes about 5 hours 40 minutes.",
    "escalated": False,
    "confidence_score": 0.62,
    "faq_matched_id": "123e4567-e89b-12d3-a456-426614174000",
    "escalation_id": None,
    "processing_time_ms": 25
}


# ========== Dependencies ==========

def get_faq_matcher(request: Request) -> FAQMatcher:
    """Get the shared matcher from app state."""
    matcher = getattr(request.app.state, "faq_matcher", None)
    if matcher is None:
        raise HTTPException(
            status_code=503,
            detail="FAQ matcher not initialized"
        )
    return matcher


async def get_matching_service(
    session: AsyncSession = Depends(get_session),
    matcher: FAQMatcher = Depends(get_faq_matcher)
) -> FAQMatchingService:
    """Get FAQ matching service instance."""
    return FAQMatchingService(
        SQLAlchemyFAQRepository(session),
        SQLAlchemySettingsRepository(session),
        matcher,
        timeout_seconds=settings.faq_match_timeout_seconds,
    )


async def get_feedback_service(
    session: AsyncSession = Depends(get_session)
) -> FeedbackService:
    """Get feedback service instance."""
    return FeedbackService(SQLAlchemyFAQRepository(session))


async def get_resolution_service(
    session: AsyncSession = Depends(get_session),
    matching_service: FAQMatchingService = Depends(get_matching_service),
    feedback_service: FeedbackService = Depends(get_feedback_service)
) -> ChatResolutionService:
    """Get chat resolution service instance."""
    escalation_service = EscalationService(
        SQLAlchemyEscalationRepository(session),
        settings.escalation_default_priority,
    )
    return ChatResolutionService(
        matching_service,
        feedback_service,
        EscalationSinkAdapter(escalation_service),
        settings.escalation_default_priority,
    )


def _corpus_unavailable(correlation_id: str, error: CorpusUnavailableException) -> HTTPException:
    logger.error(
        "FAQ request failed, corpus unavailable",
        extra={"correlation_id": correlation_id, "error": error.message}
    )
    return HTTPException(status_code=503, detail=SERVICE_UNAVAILABLE_MESSAGE)


def _category(value: Optional[str]) -> Optional[FAQCategory]:
    return FAQCategory(value) if value else None


# ========== Route Handlers ==========

@router.post(
    "/match",
    response_model=MatchResponse,
    summary="Match a customer query against the FAQ corpus",
    description="""
    Score the query against every active FAQ entry with trigram similarity,
    drop candidates below the confidence threshold and rank the rest.

    **Ordering**: entries targeting one of the customer's scooter models come
    first, then higher similarity, then FAQ id.

    **Escalation**: `escalate` is true when nothing clears the threshold
    (blank query, empty corpus, no confident match or a scoring timeout).

    **Scooter models**: `450S`, `450X`, `Rizta`
    """,
    responses={
        200: {
            "description": "Ranked matches",
            "content": {
                "application/json": {
                    "example": MATCH_RESPONSE_EXAMPLE
                }
            }
        },
        503: {
            "description": "FAQ corpus unavailable"
        }
    }
)
async def match_query(
    request: Request,
    payload: MatchRequest,
    service: FAQMatchingService = Depends(get_matching_service)
):
    start_time = time.perf_counter()
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    logger.info(
        "Matching FAQ query",
        extra={
            "correlation_id": correlation_id,
            "query_length": len(payload.query),
            "scooter_models": payload.scooter_models
        }
    )

    try:
        result = await service.match(
            Query(payload.query, frozenset(payload.scooter_models)),
            category=_category(payload.category),
            limit=payload.limit,
        )
    except CorpusUnavailableException as e:
        raise _corpus_unavailable(correlation_id, e)

    total_time = int((time.perf_counter() - start_time) * 1000)

    logger.info(
        "FAQ query matched",
        extra={
            "correlation_id": correlation_id,
            "matches": len(result),
            "escalate": result.should_escalate,
            "timed_out": result.timed_out,
            "latency_ms": total_time
        }
    )

    return MatchResponse.from_domain(payload.query, result, total_time)


@router.get(
    "/search",
    response_model=MatchResponse,
    summary="Search FAQs",
    description="""
    Search surface for the help screen. Same ranking as `POST /faq/match`,
    limited to the configured search limit (10 by default).

    Pass `models` once per owned scooter model, e.g. `?q=range&models=450X`.
    """
)
async def search_faqs(
    request: Request,
    q: str = QueryParam("", max_length=2000, description="Search text"),
    models: List[ScooterModelStr] = QueryParam(default=[], description="Owned scooter models"),
    category: Optional[FAQCategoryStr] = QueryParam(None, description="Restrict to one category"),
    service: FAQMatchingService = Depends(get_matching_service)
):
    start_time = time.perf_counter()
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    try:
        result = await service.match(
            Query(q, frozenset(models)),
            category=_category(category),
            limit=settings.faq_search_limit or FAQRanker.SEARCH_LIMIT,
        )
    except CorpusUnavailableException as e:
        raise _corpus_unavailable(correlation_id, e)

    return MatchResponse.from_domain(q, result, int((time.perf_counter() - start_time) * 1000))


@router.get(
    "",
    response_model=BrowseResponse,
    summary="Browse FAQs",
    description="""
    List active FAQ entries, most helpful first.

    Optionally restrict to a category and to entries targeting at least one
    of the given scooter models.
    """
)
async def browse_faqs(
    request: Request,
    category: Optional[FAQCategoryStr] = QueryParam(None),
    models: List[ScooterModelStr] = QueryParam(default=[]),
    limit: Optional[int] = QueryParam(None, ge=1, le=500),
    service: FAQMatchingService = Depends(get_matching_service)
):
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    try:
        entries = await service.browse(
            category=_category(category),
            scooter_models=models,
            limit=limit,
        )
    except CorpusUnavailableException as e:
        raise _corpus_unavailable(correlation_id, e)

    return BrowseResponse(
        faqs=[FAQEntryInfo.from_domain(entry) for entry in entries],
        total_count=len(entries)
    )


@router.post(
    "/{faq_id}/view",
    response_model=FeedbackResponse,
    summary="Record an FAQ view",
    responses={
        404: {"description": "FAQ not found"},
        502: {"description": "Counter could not be written"}
    }
)
async def record_view(
    request: Request,
    faq_id: str,
    service: FeedbackService = Depends(get_feedback_service)
):
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    try:
        await service.record_view(faq_id)
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except FeedbackWriteException as e:
        logger.error(
            "View not recorded",
            extra={"correlation_id": correlation_id, "faq_id": faq_id}
        )
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    return FeedbackResponse(faq_id=faq_id, counter="view_count")


@router.post(
    "/{faq_id}/rating",
    response_model=FeedbackResponse,
    summary="Rate an FAQ as helpful or not helpful",
    description="""
    Add one helpful or not-helpful vote. Votes are not de-duplicated here;
    the app records at most one vote per customer per FAQ.
    """,
    responses={
        404: {"description": "FAQ not found"},
        502: {"description": "Counter could not be written"}
    }
)
async def rate_faq(
    request: Request,
    faq_id: str,
    payload: RatingRequest,
    service: FeedbackService = Depends(get_feedback_service)
):
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    try:
        await service.record_rating(faq_id, payload.is_helpful)
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except FeedbackWriteException as e:
        logger.error(
            "Rating not recorded",
            extra={"correlation_id": correlation_id, "faq_id": faq_id}
        )
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    counter = "helpful_count" if payload.is_helpful else "not_helpful_count"
    return FeedbackResponse(faq_id=faq_id, counter=counter)


@router.post(
    "/resolve",
    response_model=ResolveResponse,
    summary="Answer a chat message from the FAQ corpus",
    description="""
    Answer with the best matching FAQ, or escalate to the support team.

    - **Match found**: the FAQ answer is returned and a view is recorded.
    - **No match**: a `pending` escalation is opened and a fallback message
      is returned with `escalated: true`.
    - **Corpus unavailable**: 503, nothing is escalated.
    """,
    responses={
        200: {
            "description": "Answer or escalation",
            "content": {
                "application/json": {
                    "example": RESOLVE_RESPONSE_EXAMPLE
                }
            }
        },
        503: {
            "description": "FAQ corpus unavailable"
        }
    }
)
async def resolve_query(
    request: Request,
    payload: ResolveRequest,
    service: ChatResolutionService = Depends(get_resolution_service)
):
    start_time = time.perf_counter()
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    try:
        resolution = await service.resolve(
            Query(payload.query, frozenset(payload.scooter_models)),
            user_id=payload.user_id,
            conversation_id=payload.conversation_id or correlation_id,
        )
    except CorpusUnavailableException as e:
        raise _corpus_unavailable(correlation_id, e)

    total_time = int((time.perf_counter() - start_time) * 1000)

    request_logger = get_context_logger(__name__, correlation_id)
    request_logger.info(
        "Chat query answered",
        extra={
            "escalated": resolution.escalated,
            "escalation_id": resolution.escalation_id,
            "latency_ms": total_time
        }
    )

    return ResolveResponse.from_domain(resolution, total_time)


faq_router = router
