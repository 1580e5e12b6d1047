"""
Intake Value Objects
====================

Closed vocabularies for the intake record.

Every enum is ``str``-valued so members compare equal to, and serialise as,
the camelCase keys used on the wire.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class AgeBand(str, Enum):
    UNDER_18 = "under18"
    AGE_18_TO_24 = "18to24"
    AGE_25_TO_34 = "25to34"
    AGE_35_TO_44 = "35to44"
    AGE_45_TO_54 = "45to54"
    AGE_55_TO_64 = "55to64"
    AGE_65_PLUS = "65plus"


class EmploymentStatus(str, Enum):
    EMPLOYED = "employed"
    SELF_EMPLOYED = "selfEmployed"
    UNEMPLOYED = "unemployed"
    STUDENT = "student"
    CARER = "carer"
    RETIRED = "retired"
    UNABLE_TO_WORK = "unableToWork"


class RelationshipStatus(str, Enum):
    SINGLE = "single"
    IN_RELATIONSHIP = "inRelationship"
    MARRIED_CIVIL = "marriedCivil"
    SEPARATED = "separated"
    DIVORCED = "divorced"
    WIDOWED = "widowed"


class Housing(str, Enum):
    """Housing situation, declared from most to least secure."""
    SECURE = "secure"
    TEMPORARY = "temporary"
    SOFA_SURFING = "sofaSurfing"
    AT_RISK = "atRisk"
    HOMELESS = "homeless"


class Dependents(str, Enum):
    NONE = "none"
    CHILDREN = "children"
    ADULT_DEPENDENTS = "adultDependents"
    BOTH = "both"


class Severity(str, Enum):
    """How urgent the person feels their situation is, lowest first."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRISIS = "crisis"

    @property
    def requires_crisis_protocol(self) -> bool:
        return self in (Severity.HIGH, Severity.CRISIS)


class PreferredContact(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    SMS = "sms"


class Source(str, Enum):
    WEB = "web"
    FACEBOOK = "facebook"
    REFERRAL = "referral"
    WALK_IN = "walkIn"
    OTHER = "other"


class SubmissionStatus(str, Enum):
    """Lifecycle of a wizard's single submission attempt."""
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class CatalogEntry:
    """One selectable option in a fixed catalog."""
    key: str
    label: str
    description: str = ""


CONCERN_CATALOG: Tuple[CatalogEntry, ...] = (
    CatalogEntry("employment", "Employment & Skills", "Job search, CV, workplace issues"),
    CatalogEntry("relationships", "Relationships & Family", "Separation, conflict, parenting"),
    CatalogEntry("emotional", "Emotional Wellbeing", "Anxiety, low mood, loneliness"),
    CatalogEntry("finance", "Money & Debt", "Benefits, budgeting, debt advice"),
    CatalogEntry("housing", "Housing", "Insecurity, eviction risk, homelessness"),
    CatalogEntry("legal", "Legal", "Rights at work, family, immigration"),
    CatalogEntry("addiction", "Addiction", "Alcohol, drugs, gambling"),
    CatalogEntry("health", "Physical Health", "Long-term conditions, access to GP"),
    CatalogEntry("abuse", "Abuse & Safety", "Domestic abuse, coercive control"),
    CatalogEntry("social", "Social Connection", "Isolation, building community"),
)

SUPPORT_PREFERENCE_CATALOG: Tuple[CatalogEntry, ...] = (
    CatalogEntry("oneToOne", "1:1 sessions"),
    CatalogEntry("group", "Group support"),
    CatalogEntry("peer", "Peer-led"),
    CatalogEntry("online", "Online"),
    CatalogEntry("phone", "Phone"),
    CatalogEntry("inPerson", "In person"),
)

CONCERN_KEYS: Tuple[str, ...] = tuple(entry.key for entry in CONCERN_CATALOG)
SUPPORT_PREFERENCE_KEYS: Tuple[str, ...] = tuple(
    entry.key for entry in SUPPORT_PREFERENCE_CATALOG
)
