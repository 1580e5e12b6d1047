"""
Intake Application DTOs
=======================

Data Transfer Objects for the Intake API layer.

Pydantic models for request/response validation. Field names are
snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.intake.domain import (
    IntakeRecord, RiskFlags, Consent,
    AgeBand, EmploymentStatus, RelationshipStatus, Housing, Dependents,
    Severity, PreferredContact, Source,
    CONCERN_KEYS, SUPPORT_PREFERENCE_KEYS,
)
from src.triage.domain import TriageResult

PriorityStr = Literal["Low", "Medium", "High", "Immediate"]


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ========== Request DTOs ==========

class RiskFlagsPayload(CamelModel):
    self_harm: bool = False
    harm_to_others: bool = False
    domestic_abuse: bool = False
    substance_risk: bool = False


class ConsentPayload(CamelModel):
    privacy_policy_accepted: bool = False
    share_with_partners: bool = False
    anonymised_insights: bool = True
    crisis_protocol_ok: bool = False


class IntakeRecordPayload(CamelModel):
    """
    Intake record as posted by the wizard.

    Only structure is checked here (types, enum members, catalog keys).
    Required-field and format rules are the domain validator's job so
    the client gets the same per-field messages it shows inline. Any
    ``triage`` block sent by the client is ignored.
    """
    first_name: str = ""
    last_name: str = ""
    pronouns: Optional[str] = None
    email: str = ""
    phone: Optional[str] = None
    postcode: Optional[str] = None
    age_band: Optional[AgeBand] = None

    employment_status: Optional[EmploymentStatus] = None
    relationship_status: Optional[RelationshipStatus] = None
    housing: Optional[Housing] = None
    dependents: Dependents = Dependents.NONE

    concerns: List[str] = Field(default_factory=list)
    concern_details: Optional[str] = None
    severity: Optional[Severity] = None
    risk_flags: RiskFlagsPayload = Field(default_factory=RiskFlagsPayload)
    gp_registered: Optional[bool] = None

    support_preferences: List[str] = Field(default_factory=list)
    availability: Optional[str] = None
    preferred_contact: Optional[PreferredContact] = None

    consent: ConsentPayload = Field(default_factory=ConsentPayload)

    source: Source = Source.WEB

    @field_validator("concerns")
    @classmethod
    def validate_concerns(cls, v: List[str]) -> List[str]:
        """Reject keys outside the concern catalog."""
        unknown = sorted(set(v) - set(CONCERN_KEYS))
        if unknown:
            raise ValueError(f"Unknown concern keys: {', '.join(unknown)}")
        return v

    @field_validator("support_preferences")
    @classmethod
    def validate_support_preferences(cls, v: List[str]) -> List[str]:
        """Reject keys outside the support preference catalog."""
        unknown = sorted(set(v) - set(SUPPORT_PREFERENCE_KEYS))
        if unknown:
            raise ValueError(f"Unknown support preference keys: {', '.join(unknown)}")
        return v

    def to_domain(self) -> IntakeRecord:
        """Convert to domain entity."""
        return IntakeRecord(
            first_name=self.first_name,
            last_name=self.last_name,
            pronouns=self.pronouns,
            email=self.email,
            phone=self.phone,
            postcode=self.postcode,
            age_band=self.age_band,
            employment_status=self.employment_status,
            relationship_status=self.relationship_status,
            housing=self.housing,
            dependents=self.dependents,
            concerns=set(self.concerns),
            concern_details=self.concern_details,
            severity=self.severity,
            risk_flags=RiskFlags(**self.risk_flags.model_dump()),
            gp_registered=self.gp_registered,
            support_preferences=set(self.support_preferences),
            availability=self.availability,
            preferred_contact=self.preferred_contact,
            consent=Consent(**self.consent.model_dump()),
            source=self.source,
        )


# ========== Response DTOs ==========

class ValidateStepResponse(CamelModel):
    """Per-step validation outcome."""
    step: int
    valid: bool
    errors: Dict[str, str]


class TriageResponse(CamelModel):
    """Triage result for live preview."""
    risk_score: int = Field(..., ge=0)
    buckets: List[str]
    priority: PriorityStr

    @classmethod
    def from_domain(cls, result: TriageResult) -> "TriageResponse":
        """Create from domain result."""
        return cls(
            risk_score=result.risk_score,
            buckets=list(result.buckets),
            priority=result.priority.value,
        )


class SubmissionResponse(CamelModel):
    """Response after the record was accepted upstream."""
    status: str
    submission_id: str
    triage: TriageResponse
    submitted_at: datetime


class SubmissionErrorResponse(CamelModel):
    """Validation or transport failure surfaced to the form."""
    message: str
    errors: Dict[str, str] = Field(default_factory=dict)


class CatalogEntryInfo(CamelModel):
    key: str
    label: str
    description: str = ""


class CatalogResponse(CamelModel):
    """Selectable options for the concerns and preferences steps."""
    concerns: List[CatalogEntryInfo]
    support_preferences: List[CatalogEntryInfo]


class HealthResponse(CamelModel):
    """Liveness payload."""
    status: str
    timestamp: datetime
