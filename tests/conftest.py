import pytest

from src.intake.domain import (
    IntakeRecord, RiskFlags, Consent,
    EmploymentStatus, RelationshipStatus, Housing, Severity, PreferredContact,
)


@pytest.fixture
def complete_record() -> IntakeRecord:
    """A record that passes every wizard step."""
    return IntakeRecord(
        first_name="Sam",
        last_name="Taylor",
        email="sam.taylor@example.org",
        phone="07700 900123",
        postcode="SW1A 1AA",
        employment_status=EmploymentStatus.EMPLOYED,
        relationship_status=RelationshipStatus.SINGLE,
        housing=Housing.SECURE,
        concerns={"emotional", "finance"},
        concern_details="Struggling with bills since <March>.",
        severity=Severity.MODERATE,
        risk_flags=RiskFlags(),
        support_preferences={"online", "oneToOne"},
        preferred_contact=PreferredContact.EMAIL,
        consent=Consent(privacy_policy_accepted=True),
    )


@pytest.fixture
def payload_json() -> dict:
    """camelCase body for the same complete record."""
    return {
        "firstName": "Sam",
        "lastName": "Taylor",
        "email": "sam.taylor@example.org",
        "phone": "07700 900123",
        "postcode": "SW1A 1AA",
        "employmentStatus": "employed",
        "relationshipStatus": "single",
        "housing": "secure",
        "concerns": ["finance", "emotional"],
        "concernDetails": "Struggling with bills since <March>.",
        "severity": "moderate",
        "riskFlags": {"selfHarm": False},
        "supportPreferences": ["online"],
        "preferredContact": "email",
        "consent": {"privacyPolicyAccepted": True},
    }
