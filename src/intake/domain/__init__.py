"""
Intake Domain Layer
===================

Domain layer for the intake module.

Contains:
- Entities: IntakeRecord and its nested RiskFlags / Consent
- Value Objects: closed enums and the fixed option catalogs
- Validation: per-step gating rules

This layer is framework-agnostic and contains pure business logic.
"""

from src.intake.domain.value_objects import (
    AgeBand,
    EmploymentStatus,
    RelationshipStatus,
    Housing,
    Dependents,
    Severity,
    PreferredContact,
    Source,
    SubmissionStatus,
    CatalogEntry,
    CONCERN_CATALOG,
    SUPPORT_PREFERENCE_CATALOG,
    CONCERN_KEYS,
    SUPPORT_PREFERENCE_KEYS,
)
from src.intake.domain.entities import IntakeRecord, RiskFlags, Consent
from src.intake.domain.validation import validate_step, validate_all

__all__ = [
    "AgeBand",
    "EmploymentStatus",
    "RelationshipStatus",
    "Housing",
    "Dependents",
    "Severity",
    "PreferredContact",
    "Source",
    "SubmissionStatus",
    "CatalogEntry",
    "CONCERN_CATALOG",
    "SUPPORT_PREFERENCE_CATALOG",
    "CONCERN_KEYS",
    "SUPPORT_PREFERENCE_KEYS",
    "IntakeRecord",
    "RiskFlags",
    "Consent",
    "validate_step",
    "validate_all",
]
