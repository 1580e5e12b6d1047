"""
Intake Controllers (API Routes)
===============================

FastAPI routes for the intake wizard.

Controllers delegate to the domain validator, the triage classifier and
the submission service.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status
from fastapi.responses import JSONResponse

from src.core import InsecureRandomSourceError, SubmissionFailedError, ValidationException
from src.config import WIZARD_STEPS
from src.intake.application import (
    CatalogEntryInfo,
    CatalogResponse,
    IntakeRecordPayload,
    SubmissionErrorResponse,
    SubmissionResponse,
    SubmissionService,
    TriageResponse,
    ValidateStepResponse,
    GENERIC_FAILURE_MESSAGE,
)
from src.intake.domain import CONCERN_CATALOG, SUPPORT_PREFERENCE_CATALOG, validate_step
from src.shared.infrastructure.logging import get_logger
from src.triage.domain import classify

logger = get_logger(__name__)
router = APIRouter(prefix="/intake", tags=["Intake"])


# ========== Example payloads for Swagger ==========

TRIAGE_RESPONSE_EXAMPLE = {
    "riskScore": 17,
    "buckets": ["Safety/Crisis"],
    "priority": "Immediate"
}

SUBMISSION_RESPONSE_EXAMPLE = {
    "status": "received",
    "submissionId": "9b2f7f4e-8d0c-4d7e-9a59-3c1a2f0b6e11",
    "triage": TRIAGE_RESPONSE_EXAMPLE,
    "submittedAt": "2026-01-05T10:15:00+00:00"
}


# ========== Dependencies ==========

def get_submission_service(request: Request) -> SubmissionService:
    """Get submission service from app state."""
    service = getattr(request.app.state, "submission_service", None)
    if service is None:
        raise HTTPException(
            status_code=503,
            detail="Submission service not available"
        )
    return service


def get_csrf_token(request: Request) -> Optional[str]:
    """CSRF token to forward upstream, from header first, then cookie."""
    return request.headers.get("X-CSRF-Token") or request.cookies.get("XSRF-TOKEN")


def _error_response(status_code: int, message: str, errors: Optional[dict] = None) -> JSONResponse:
    body = SubmissionErrorResponse(message=message, errors=errors or {})
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


# ========== Route Handlers ==========

@router.get(
    "/catalog",
    response_model=CatalogResponse,
    summary="List concern and support preference options"
)
async def get_catalog():
    return CatalogResponse(
        concerns=[CatalogEntryInfo(**vars(entry)) for entry in CONCERN_CATALOG],
        support_preferences=[
            CatalogEntryInfo(**vars(entry)) for entry in SUPPORT_PREFERENCE_CATALOG
        ],
    )


@router.post(
    "/validate/{step}",
    response_model=ValidateStepResponse,
    summary="Validate one wizard step",
    description="""
    Check the fields introduced by a wizard step (1-5).

    Returns one message per invalid field. Fields from later steps are
    never checked, so an empty ``errors`` means the step may advance.
    """
)
async def validate_wizard_step(
    payload: IntakeRecordPayload,
    step: int = Path(..., ge=1, le=WIZARD_STEPS),
):
    errors = validate_step(step, payload.to_domain())
    return ValidateStepResponse(step=step, valid=not errors, errors=errors)


@router.post(
    "/triage",
    response_model=TriageResponse,
    summary="Preview triage for a record",
    description="""
    Compute the transparent triage estimate for a (possibly incomplete)
    record: risk score, support buckets in display order, and priority.
    """,
    responses={
        200: {
            "description": "Triage computed",
            "content": {"application/json": {"example": TRIAGE_RESPONSE_EXAMPLE}}
        }
    }
)
async def preview_triage(payload: IntakeRecordPayload):
    return TriageResponse.from_domain(classify(payload.to_domain()))


@router.post(
    "/submit",
    response_model=SubmissionResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit a completed intake record",
    description="""
    Validate every step, recompute triage, sanitise free text and forward
    the record to the intake endpoint with a fresh idempotency key.

    Any triage block sent by the client is ignored.
    """,
    responses={
        202: {
            "description": "Submission accepted upstream",
            "content": {"application/json": {"example": SUBMISSION_RESPONSE_EXAMPLE}}
        },
        422: {"description": "One or more fields are invalid"},
        502: {"description": "Intake endpoint unreachable or rejected the submission"},
        503: {"description": "Submission cannot be made securely right now"}
    }
)
async def submit_intake(
    request: Request,
    payload: IntakeRecordPayload,
    service: SubmissionService = Depends(get_submission_service),
    csrf_token: Optional[str] = Depends(get_csrf_token),
):
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    record = payload.to_domain()

    try:
        receipt = await service.submit(record, csrf_token=csrf_token)
    except ValidationException as e:
        logger.info(
            "Intake submission failed validation",
            extra={"correlation_id": correlation_id, "fields": sorted(e.errors)}
        )
        return _error_response(422, e.message, e.errors)
    except SubmissionFailedError as e:
        logger.error(
            "Intake submission failed",
            extra={
                "correlation_id": correlation_id,
                "status_code": e.status_code,
                "details": e.details
            }
        )
        return _error_response(502, e.user_message)
    except InsecureRandomSourceError as e:
        logger.critical(
            "No secure random source for idempotency key",
            extra={"correlation_id": correlation_id, "details": e.details}
        )
        return _error_response(503, GENERIC_FAILURE_MESSAGE)

    return SubmissionResponse(
        status="received",
        submission_id=receipt.submission_id,
        triage=TriageResponse.from_domain(receipt.triage),
        submitted_at=receipt.submitted_at,
    )


# Export router for inclusion in main app
intake_router = router
