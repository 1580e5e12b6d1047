"""
Intake Service - Main Application
=================================

Assistance-request intake service for a charity's support programme.

Modules:
- Intake: five-step wizard validation and submission forwarding
- Triage: transparent risk score, support buckets and priority

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, value objects and business rules
- Infrastructure: HTTP transport to the intake endpoint
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import settings
from src.core import ApplicationException
from src.intake.application import HealthResponse, SubmissionService
from src.intake.infrastructure import HttpSubmissionTransport
from src.intake.interfaces import intake_router
from src.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from src.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Create the intake endpoint transport and submission service

    SHUTDOWN:
    1. Close the transport's HTTP client
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Intake Service", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    transport = HttpSubmissionTransport()
    if not transport.endpoint_url:
        logger.warning("INTAKE_ENDPOINT_URL not set - submissions will fail")

    app.state.settings = settings
    app.state.submission_service = SubmissionService(transport)

    logger.info("Intake Service started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Intake Service")
    await transport.close()
    logger.info("Intake Service shutdown complete")


app = FastAPI(
    title="Intake Service API",
    description="""
    ## Assistance-Request Intake

    Validates the five-step intake wizard, previews a transparent triage
    estimate, and forwards completed requests for human review.

    **Endpoints:**
    - `GET /intake/catalog` - Concern and support preference options
    - `POST /intake/validate/{step}` - Validate one wizard step
    - `POST /intake/triage` - Live triage preview
    - `POST /intake/submit` - Submit a completed request

    **Triage priority:** score >= 12 Immediate, >= 8 High, >= 4 Medium,
    otherwise Low.
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
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(intake_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], response_model=HealthResponse)
async def health_check():
    """Health check endpoint for load balancers and orchestrators."""
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "intake": {
                "prefix": "/intake",
                "endpoints": [
                    "GET /intake/catalog - List options",
                    "POST /intake/validate/{step} - Validate a wizard step",
                    "POST /intake/triage - Preview triage",
                    "POST /intake/submit - Submit a request"
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
        log_level="info"
    )
