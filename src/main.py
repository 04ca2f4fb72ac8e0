"""
FAQ Matching Service - Main Application
=======================================

Customer-support FAQ engine for the scooter app.

Modules:
- FAQ: Match customer queries to FAQ entries, browse, collect feedback,
  answer chat messages
- Escalation: Queue of queries handed over to human support

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services, ports and DTOs
- Domain: Entities, value objects and the matcher
- Infrastructure: Database models and repositories
"""

from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Configuration and Core
from src.config import settings
from src.core import ApplicationException

# Infrastructure
from src.infrastructure.database import init_database, close_database, create_tables

# Domain
from src.faq.domain import ConfidencePolicy, FAQMatcher, FAQRanker, TrigramSimilarityScorer

# Module Routers
from src.faq.interfaces import faq_router
from src.escalation.interfaces import escalation_router

# Middleware
from src.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler
)

# Logging
from src.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)

# Global service instances
faq_matcher = None
database_ready = False


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database
    3. Create database tables
    4. Start the scoring worker pool and matcher

    SHUTDOWN:
    1. Stop the scoring worker pool
    2. Close database connections
    """
    global faq_matcher, database_ready

    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting FAQ Matching Service", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    # Initialize database
    logger.info("Initializing database")
    init_database()

    # Create tables (for development - use migrations in production)
    # Note: If database is not available, the server will start but
    # database-dependent endpoints will fail
    logger.info("Creating database tables")
    try:
        await create_tables()
        database_ready = True
    except Exception as e:
        logger.warning(f"Database not available - running in degraded mode: {e}")
        database_ready = False

    # Scoring pool shared by all requests; the matcher itself is stateless
    scoring_executor = ThreadPoolExecutor(
        max_workers=settings.faq_scoring_workers,
        thread_name_prefix="faq-score"
    )
    faq_matcher = FAQMatcher(
        TrigramSimilarityScorer(),
        ConfidencePolicy(),
        FAQRanker(),
        executor=scoring_executor,
        max_workers=settings.faq_scoring_workers,
    )

    # Store services in app state for dependency injection
    app.state.settings = settings
    app.state.faq_matcher = faq_matcher
    app.state.database_ready = database_ready

    logger.info("FAQ Matching Service started successfully", extra={
        "scoring_workers": settings.faq_scoring_workers,
        "confidence_threshold": settings.faq_confidence_threshold
    })

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down FAQ Matching Service")

    app.state.faq_matcher = None
    scoring_executor.shutdown(wait=True)

    # Close database
    await close_database()

    logger.info("FAQ Matching Service shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="FAQ Matching API",
    description="""
    ## Scooter Customer Support FAQ Engine

    Matches free-text customer questions to curated FAQ entries and hands
    unanswered questions to human support.

    ---

    ### FAQ Module

    **Endpoints:**
    - `POST /faq/match` - Ranked matches for a query
    - `GET /faq/search` - Search the help screen (top 10)
    - `GET /faq` - Browse FAQs, most helpful first
    - `POST /faq/{id}/view` - Record a view
    - `POST /faq/{id}/rating` - Helpful / not helpful vote
    - `POST /faq/resolve` - Answer a chat message or escalate it

    **Matching:**
    - Trigram similarity against question and question + answer
    - Confidence threshold (default 0.15), editable in `system_settings`
    - Entries for the customer's scooter models (`450S`, `450X`, `Rizta`) rank first

    ---

    ### Escalation Module

    **Endpoints:**
    - `POST /escalations` - Escalate a query manually
    - `GET /escalations` - Admin queue, newest first
    - `GET /escalations/{id}` - One escalation
    - `POST /escalations/{id}/assign|resolve|close` - Lifecycle

    **Lifecycle:** `pending -> in_progress -> resolved`, `closed` from any open status.

    ---
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(faq_router)
app.include_router(escalation_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], responses={
    200: {
        "description": "Service is healthy",
        "content": {
            "application/json": {
                "example": {
                    "status": "healthy",
                    "version": "1.0.0",
                    "environment": "development",
                    "checks": {
                        "database": "connected",
                        "faq_matcher": "ready"
                    }
                }
            }
        }
    }
})
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.

    Returns service health status including:
    - Database availability at startup
    - Matcher readiness
    """
    matcher_ready = getattr(request.app.state, "faq_matcher", None) is not None
    db_ready = getattr(request.app.state, "database_ready", False)

    checks = {
        "database": "connected" if db_ready else "unavailable",
        "faq_matcher": "ready" if matcher_ready else "not_initialized"
    }

    return {
        "status": "healthy" if db_ready and matcher_ready else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "FAQ Matching Service",
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "faq": {
                "prefix": "/faq",
                "endpoints": [
                    "POST /faq/match - Match a query",
                    "GET /faq/search - Search FAQs",
                    "GET /faq - Browse FAQs",
                    "POST /faq/{id}/view - Record a view",
                    "POST /faq/{id}/rating - Rate an FAQ",
                    "POST /faq/resolve - Answer or escalate a chat message"
                ]
            },
            "escalations": {
                "prefix": "/escalations",
                "endpoints": [
                    "POST /escalations - Escalate a query",
                    "GET /escalations - List escalations",
                    "GET /escalations/{id} - Get an escalation",
                    "POST /escalations/{id}/assign - Assign to an admin",
                    "POST /escalations/{id}/resolve - Resolve",
                    "POST /escalations/{id}/close - Close"
                ]
            }
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower()
    )
