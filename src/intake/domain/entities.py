"""
Intake Domain Entities
======================

The in-progress record for one person's request for support.

Pure Python business objects; the record is created empty when the
wizard opens and mutated in place as fields are edited.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from src.core import UnknownCatalogKeyError
from src.intake.domain.value_objects import (
    AgeBand, EmploymentStatus, RelationshipStatus, Housing, Dependents,
    Severity, PreferredContact, Source,
    CONCERN_KEYS, SUPPORT_PREFERENCE_KEYS,
)


@dataclass
class RiskFlags:
    """Acute safety indicators, each independent of the others."""
    self_harm: bool = False
    harm_to_others: bool = False
    domestic_abuse: bool = False
    substance_risk: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "selfHarm": self.self_harm,
            "harmToOthers": self.harm_to_others,
            "domesticAbuse": self.domestic_abuse,
            "substanceRisk": self.substance_risk,
        }


@dataclass
class Consent:
    """
    Consent choices from the final wizard step.

    ``anonymised_insights`` starts opted in; the other three start
    opted out.
    """
    privacy_policy_accepted: bool = False
    share_with_partners: bool = False
    anonymised_insights: bool = True
    crisis_protocol_ok: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "privacyPolicyAccepted": self.privacy_policy_accepted,
            "shareWithPartners": self.share_with_partners,
            "anonymisedInsights": self.anonymised_insights,
            "crisisProtocolOk": self.crisis_protocol_ok,
        }


def _ordered(keys: Set[str], catalog: tuple) -> List[str]:
    return [key for key in catalog if key in keys]


@dataclass
class IntakeRecord:
    """
    One person's intake submission.

    ``concerns`` and ``support_preferences`` only ever hold keys from
    their fixed catalogs; use the ``add_``/``toggle_`` helpers rather
    than mutating the sets directly.
    """
    # 1) Identity & contact
    first_name: str = ""
    last_name: str = ""
    pronouns: Optional[str] = None
    email: str = ""
    phone: Optional[str] = None
    postcode: Optional[str] = None
    age_band: Optional[AgeBand] = None

    # 2) Background
    employment_status: Optional[EmploymentStatus] = None
    relationship_status: Optional[RelationshipStatus] = None
    housing: Optional[Housing] = None
    dependents: Dependents = Dependents.NONE

    # 3) Presenting issues
    concerns: Set[str] = field(default_factory=set)
    concern_details: Optional[str] = None
    severity: Optional[Severity] = None
    risk_flags: RiskFlags = field(default_factory=RiskFlags)
    gp_registered: Optional[bool] = None

    # 4) Preferences & logistics
    support_preferences: Set[str] = field(default_factory=set)
    availability: Optional[str] = None
    preferred_contact: Optional[PreferredContact] = None

    # 5) Safeguarding & consent
    consent: Consent = field(default_factory=Consent)

    source: Source = Source.WEB

    def __post_init__(self):
        """Enforce catalog membership for records built in one go."""
        self.concerns = set(self.concerns)
        self.support_preferences = set(self.support_preferences)
        for key in self.concerns:
            _check_key("concern", key, CONCERN_KEYS)
        for key in self.support_preferences:
            _check_key("support preference", key, SUPPORT_PREFERENCE_KEYS)

    def add_concern(self, key: str) -> None:
        _check_key("concern", key, CONCERN_KEYS)
        self.concerns.add(key)

    def toggle_concern(self, key: str) -> None:
        _check_key("concern", key, CONCERN_KEYS)
        self.concerns ^= {key}

    def add_support_preference(self, key: str) -> None:
        _check_key("support preference", key, SUPPORT_PREFERENCE_KEYS)
        self.support_preferences.add(key)

    def toggle_support_preference(self, key: str) -> None:
        _check_key("support preference", key, SUPPORT_PREFERENCE_KEYS)
        self.support_preferences ^= {key}

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize with the camelCase wire keys.

        Sets are emitted as lists in catalog order so the output is
        deterministic. Free text is returned as entered; sanitising is
        the submission layer's job.
        """
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "pronouns": self.pronouns,
            "email": self.email,
            "phone": self.phone,
            "postcode": self.postcode,
            "ageBand": _value(self.age_band),
            "employmentStatus": _value(self.employment_status),
            "relationshipStatus": _value(self.relationship_status),
            "housing": _value(self.housing),
            "dependents": _value(self.dependents),
            "concerns": _ordered(self.concerns, CONCERN_KEYS),
            "concernDetails": self.concern_details,
            "severity": _value(self.severity),
            "riskFlags": self.risk_flags.to_dict(),
            "gpRegistered": self.gp_registered,
            "supportPreferences": _ordered(self.support_preferences, SUPPORT_PREFERENCE_KEYS),
            "availability": self.availability,
            "preferredContact": _value(self.preferred_contact),
            "consent": self.consent.to_dict(),
            "source": _value(self.source),
        }


def _check_key(catalog: str, key: str, allowed: tuple) -> None:
    if key not in allowed:
        raise UnknownCatalogKeyError(catalog, key)


def _value(member: Optional[Any]) -> Optional[str]:
    return member.value if member is not None else None
