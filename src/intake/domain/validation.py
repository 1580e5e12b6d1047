"""
Intake Validation
=================

Per-step gating rules for the five-step intake wizard.

``validate_step`` only looks at the fields a step introduces, so an
error on a later step never blocks an earlier one. Each field gets at
most one message; the checks for a field are mutually exclusive.
"""

import re
from typing import Callable, Dict

from src.config import MAX_NAME_LENGTH, MAX_TEXT_LENGTH, WIZARD_STEPS
from src.intake.domain.entities import IntakeRecord

ErrorMap = Dict[str, str]

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+", re.IGNORECASE)
UK_PHONE_RE = re.compile(
    r"(?:\+44\s?7\d{3}|07\d{3})\s?\d{3}\s?\d{3}"
    r"|(?:\+44\s?1\d{3}|01\d{3}|\+44\s?2\d{2}|02\d{2})\s?\d{3,4}\s?\d{3,4}"
)
UK_POSTCODE_RE = re.compile(r"[A-Z]{1,2}\d[A-Z\d]?\s?\d[A-Z]{2}", re.IGNORECASE)


def _name_error(value: str, label: str) -> str | None:
    if not value or not value.strip():
        return f"{label} is required"
    if len(value) > MAX_NAME_LENGTH:
        return f"{label} must be less than {MAX_NAME_LENGTH} characters"
    return None


def _identity_errors(record: IntakeRecord) -> ErrorMap:
    errors: ErrorMap = {}

    for key, label, value in (
        ("firstName", "First name", record.first_name),
        ("lastName", "Last name", record.last_name),
    ):
        message = _name_error(value, label)
        if message:
            errors[key] = message

    if not record.email or not record.email.strip() or not EMAIL_RE.fullmatch(record.email):
        errors["email"] = "Enter a valid email address"

    if record.phone and not UK_PHONE_RE.fullmatch(record.phone):
        errors["phone"] = "Enter a valid UK phone number"

    if record.postcode and not UK_POSTCODE_RE.fullmatch(record.postcode):
        errors["postcode"] = "Enter a valid UK postcode (e.g., SW1A 1AA)"

    return errors


def _background_errors(record: IntakeRecord) -> ErrorMap:
    errors: ErrorMap = {}
    if record.employment_status is None:
        errors["employmentStatus"] = "Select your current employment status"
    if record.relationship_status is None:
        errors["relationshipStatus"] = "Select your current relationship status"
    if record.housing is None:
        errors["housing"] = "Select your housing situation"
    return errors


def _concern_errors(record: IntakeRecord) -> ErrorMap:
    errors: ErrorMap = {}
    if not record.concerns:
        errors["concerns"] = "Pick at least one area you want help with"
    if record.severity is None:
        errors["severity"] = "How urgent/severe does this feel right now?"
    if record.concern_details and len(record.concern_details) > MAX_TEXT_LENGTH:
        errors["concernDetails"] = f"Details must be less than {MAX_TEXT_LENGTH} characters"
    return errors


def _preference_errors(record: IntakeRecord) -> ErrorMap:
    if record.preferred_contact is None:
        return {"preferredContact": "Choose how we should contact you"}
    return {}


def _consent_errors(record: IntakeRecord) -> ErrorMap:
    errors: ErrorMap = {}
    if not record.consent.privacy_policy_accepted:
        errors["privacy"] = "You must accept the Privacy Policy to continue"
    if (
        record.severity is not None
        and record.severity.requires_crisis_protocol
        and not record.consent.crisis_protocol_ok
    ):
        errors["crisis"] = "Please acknowledge the crisis protocol"
    return errors


STEP_RULES: Dict[int, Callable[[IntakeRecord], ErrorMap]] = {
    1: _identity_errors,
    2: _background_errors,
    3: _concern_errors,
    4: _preference_errors,
    5: _consent_errors,
}


def validate_step(step: int, record: IntakeRecord) -> ErrorMap:
    """
    Validate the fields introduced by one wizard step.

    Args:
        step: Wizard step number, 1 to 5
        record: The record being edited

    Returns:
        Mapping of field name to message; empty when the step is valid

    Raises:
        ValueError: If ``step`` is not a wizard step
    """
    try:
        rule = STEP_RULES[step]
    except KeyError:
        raise ValueError(f"step must be between 1 and {WIZARD_STEPS}, got {step!r}") from None
    return rule(record)


def validate_all(record: IntakeRecord) -> ErrorMap:
    """Validate every step; used as the final gate before forwarding."""
    errors: ErrorMap = {}
    for step in range(1, WIZARD_STEPS + 1):
        errors.update(validate_step(step, record))
    return errors
