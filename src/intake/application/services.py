"""
Intake Application Services
===========================

Application services for the intake wizard.

Orchestrates validation, triage and submission between the domain and
the outbound transport.
"""

import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from src.config import MAX_TEXT_LENGTH, SCHEMA_VERSION, WIZARD_STEPS
from src.core import (
    DomainException,
    DuplicateSubmissionError,
    InsecureRandomSourceError,
    SubmissionFailedError,
    ValidationException,
)
from src.intake.domain import IntakeRecord, SubmissionStatus, validate_all, validate_step
from src.shared.infrastructure.logging import get_logger
from src.triage.domain import TriageResult, classify

logger = get_logger(__name__)

SANITISED_FIELDS = (
    "firstName", "lastName", "email", "phone", "postcode",
    "pronouns", "concernDetails", "availability",
)
OPTIONAL_TEXT_FIELDS = frozenset({
    "phone", "postcode", "pronouns", "concernDetails", "availability",
})

GENERIC_FAILURE_MESSAGE = (
    "Sorry, something went wrong. Please try again or contact us directly."
)

# A bare "&" is escaped; one that already starts an entity is left alone.
_ESCAPE_RE = re.compile(
    r"&(?!(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);)|[<>\"'/]"
)
_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
}


# ========== Sanitisation ==========

def escape_html(value: str) -> str:
    """Entity-escape ``& < > " ' /`` in one pass; idempotent."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group()], value)


def sanitize_text(value: str, max_length: int = MAX_TEXT_LENGTH) -> str:
    """
    Escape, trim and cap a free-text value.

    Never cuts an entity in half, so sanitising twice gives the same
    result as sanitising once.
    """
    text = escape_html(value).strip()
    if len(text) > max_length:
        text = text[:max_length]
        amp = text.rfind("&")
        if amp != -1 and ";" not in text[amp:]:
            text = text[:amp]
    return text.rstrip()


def sanitize_record(record: IntakeRecord) -> Dict[str, Any]:
    """Serialize a record with every free-text field sanitised."""
    data = record.to_dict()
    for key in SANITISED_FIELDS:
        value = data.get(key)
        if value:
            data[key] = sanitize_text(value)
        elif key in OPTIONAL_TEXT_FIELDS:
            data[key] = None
    return data


# ========== Submission ==========

def generate_idempotency_key() -> str:
    """
    Generate a random UUID4 for the ``X-Idempotency-Key`` header.

    Raises:
        InsecureRandomSourceError: If the OS has no secure random source
    """
    try:
        return str(uuid.uuid4())
    except NotImplementedError as e:
        raise InsecureRandomSourceError({"error": str(e)}) from e


def build_submission_payload(
    record: IntakeRecord,
    triage: TriageResult,
    submitted_at: datetime,
) -> Dict[str, Any]:
    """Sanitised record plus triage, timestamp and schema version."""
    payload = sanitize_record(record)
    payload["triage"] = triage.to_dict()
    payload["submittedAt"] = submitted_at.isoformat()
    payload["schemaVersion"] = SCHEMA_VERSION
    return payload


class ISubmissionTransport(ABC):
    """Interface for delivering a submission to the intake endpoint."""

    @abstractmethod
    async def send(self, payload: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
        """
        POST one submission.

        Returns the endpoint's JSON body on a 2xx response.

        Raises:
            SubmissionFailedError: On network failure or non-2xx response
        """


@dataclass(frozen=True)
class SubmissionReceipt:
    """What the caller learns from an accepted submission."""
    submission_id: str
    triage: TriageResult
    submitted_at: datetime
    response: Dict[str, Any] = field(default_factory=dict)


class SubmissionService:
    """
    Service for forwarding a completed record to the intake endpoint.

    The triage result is always recomputed here; whatever the client
    previewed is never trusted.
    """

    def __init__(self, transport: ISubmissionTransport):
        self._transport = transport

    async def submit(
        self,
        record: IntakeRecord,
        csrf_token: Optional[str] = None,
    ) -> SubmissionReceipt:
        """
        Validate, triage and forward a record.

        Args:
            record: Completed intake record (left unmodified)
            csrf_token: Token to forward as ``X-CSRF-Token``, if any

        Returns:
            SubmissionReceipt with the idempotency key used as submission id

        Raises:
            ValidationException: If any wizard step is invalid
            InsecureRandomSourceError: If no idempotency key can be generated
            SubmissionFailedError: On transport failure or rejection
        """
        errors = validate_all(record)
        if errors:
            raise ValidationException(errors)

        triage = classify(record)
        submission_id = generate_idempotency_key()
        submitted_at = datetime.now(timezone.utc)

        headers = {
            "Content-Type": "application/json",
            "X-Idempotency-Key": submission_id,
        }
        if csrf_token:
            headers["X-CSRF-Token"] = csrf_token

        payload = build_submission_payload(record, triage, submitted_at)

        logger.info(
            "Forwarding intake submission",
            extra={
                "submission_id": submission_id,
                "priority": triage.priority.value,
                "risk_score": triage.risk_score,
                "buckets": list(triage.buckets),
            }
        )

        response = await self._transport.send(payload, headers)

        logger.info(
            "Intake submission accepted",
            extra={"submission_id": submission_id}
        )

        return SubmissionReceipt(
            submission_id=submission_id,
            triage=triage,
            submitted_at=submitted_at,
            response=response,
        )


# ========== Wizard ==========

class IntakeWizard:
    """
    Step controller owning one in-progress intake record.

    Tracks the current step, the errors shown for it and the status of
    the single submission attempt. A failed submission leaves the record
    untouched so the person can retry; a successful one releases it.
    """

    def __init__(self, record: Optional[IntakeRecord] = None):
        self._record: Optional[IntakeRecord] = record or IntakeRecord()
        self.step = 1
        self.errors: Dict[str, str] = {}
        self.status = SubmissionStatus.IDLE
        self.submit_error = ""
        self.receipt: Optional[SubmissionReceipt] = None

    @property
    def record(self) -> IntakeRecord:
        if self._record is None:
            raise DomainException("Intake record has already been submitted")
        return self._record

    @property
    def progress(self) -> float:
        """Percentage through the wizard."""
        return self.step / WIZARD_STEPS * 100

    @property
    def triage(self) -> TriageResult:
        """Live triage preview of the current record."""
        return classify(self.record)

    def next(self) -> bool:
        """Advance one step if the current step validates."""
        self.errors = validate_step(self.step, self.record)
        if self.errors:
            return False
        self.step = min(WIZARD_STEPS, self.step + 1)
        return True

    def prev(self) -> None:
        self.step = max(1, self.step - 1)
        self.errors = {}

    async def submit(
        self,
        service: SubmissionService,
        csrf_token: Optional[str] = None,
    ) -> bool:
        """
        Submit the record once.

        Returns:
            True on success; False with ``errors`` or ``submit_error`` set

        Raises:
            DuplicateSubmissionError: If a submission is in flight or done
            InsecureRandomSourceError: If no secure idempotency key is possible

        Any other exception (including cancellation) leaves the wizard in
        ``error`` with the record intact, then propagates.
        """
        if self.status == SubmissionStatus.SUBMITTING:
            raise DuplicateSubmissionError("A submission is already in progress")
        if self.status == SubmissionStatus.SUCCESS:
            raise DuplicateSubmissionError("This request has already been submitted")

        self.errors = validate_step(WIZARD_STEPS, self.record)
        if self.errors:
            return False

        self.status = SubmissionStatus.SUBMITTING
        self.submit_error = ""

        try:
            receipt = await service.submit(self.record, csrf_token=csrf_token)
        except ValidationException as e:
            self.status = SubmissionStatus.IDLE
            self.errors = e.errors
            return False
        except SubmissionFailedError as e:
            logger.error(
                "Submission error",
                extra={"error": e.message, "status_code": e.status_code, "details": e.details}
            )
            self.status = SubmissionStatus.ERROR
            self.submit_error = e.user_message or GENERIC_FAILURE_MESSAGE
            return False
        except InsecureRandomSourceError:
            self.status = SubmissionStatus.ERROR
            self.submit_error = GENERIC_FAILURE_MESSAGE
            raise
        except BaseException as e:
            # Cancelled, timed out or an unexpected transport error; the
            # record is kept so the submission can be retried.
            logger.error(
                "Submission interrupted",
                extra={"error": str(e), "error_type": type(e).__name__}
            )
            self.status = SubmissionStatus.ERROR
            self.submit_error = GENERIC_FAILURE_MESSAGE
            raise

        self.status = SubmissionStatus.SUCCESS
        self.receipt = receipt
        self._record = None
        return True
