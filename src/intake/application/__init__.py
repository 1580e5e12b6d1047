"""
Intake Application Layer
========================

Application layer for the intake module.

Contains:
- Services: sanitisation, submission orchestration, wizard step control
- DTOs: Data transfer objects for API serialization
"""

from src.intake.application.dto import (
    IntakeRecordPayload,
    ValidateStepResponse,
    TriageResponse,
    SubmissionResponse,
    SubmissionErrorResponse,
    CatalogEntryInfo,
    CatalogResponse,
    HealthResponse,
)
from src.intake.application.services import (
    escape_html,
    sanitize_text,
    sanitize_record,
    generate_idempotency_key,
    build_submission_payload,
    ISubmissionTransport,
    SubmissionReceipt,
    SubmissionService,
    IntakeWizard,
    GENERIC_FAILURE_MESSAGE,
)

__all__ = [
    # DTOs
    "IntakeRecordPayload",
    "ValidateStepResponse",
    "TriageResponse",
    "SubmissionResponse",
    "SubmissionErrorResponse",
    "CatalogEntryInfo",
    "CatalogResponse",
    "HealthResponse",
    # Services
    "escape_html",
    "sanitize_text",
    "sanitize_record",
    "generate_idempotency_key",
    "build_submission_payload",
    "SubmissionReceipt",
    "SubmissionService",
    "IntakeWizard",
    "GENERIC_FAILURE_MESSAGE",
    # Transport Interface
    "ISubmissionTransport",
]
