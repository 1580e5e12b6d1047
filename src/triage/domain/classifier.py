"""
Triage Classifier
=================

Deterministic, explainable priority signal for an intake record.

Scoring is a plain sum of independent contributions, so the order the
rules are listed in does not matter. Bucket derivation does depend on
order: ``BUCKET_RULES`` is the canonical display order and is walked
top to bottom, never the record's concern set.
"""

from typing import Dict, FrozenSet, List, Tuple

from src.intake.domain import IntakeRecord, Severity, Housing, EmploymentStatus
from src.triage.domain.entities import Priority, TriageResult


SEVERITY_WEIGHTS: Dict[Severity, int] = {
    Severity.LOW: 0,
    Severity.MODERATE: 2,
    Severity.HIGH: 4,
    Severity.CRISIS: 6,
}

SELF_HARM_WEIGHT = 6
DOMESTIC_ABUSE_WEIGHT = 6
HARM_TO_OTHERS_WEIGHT = 4
SUBSTANCE_RISK_WEIGHT = 3

HOUSING_RISK_WEIGHT = 3
HOUSING_AT_RISK: FrozenSet[Housing] = frozenset({Housing.HOMELESS, Housing.AT_RISK})

EMPLOYMENT_RISK_WEIGHT = 2
EMPLOYMENT_AT_RISK: FrozenSet[EmploymentStatus] = frozenset({
    EmploymentStatus.UNEMPLOYED, EmploymentStatus.UNABLE_TO_WORK,
})

# (triggering concern keys, bucket) in display order
BUCKET_RULES: Tuple[Tuple[FrozenSet[str], str], ...] = (
    (frozenset({"abuse"}), "Safety/Crisis"),
    (frozenset({"emotional", "addiction"}), "Mental Health & Addiction"),
    (frozenset({"employment"}), "Employment & Skills"),
    (frozenset({"finance"}), "Money/Debt Advice"),
    (frozenset({"housing"}), "Housing Support"),
    (frozenset({"relationships"}), "Family/Relationship Support"),
    (frozenset({"health"}), "Physical Health Navigation"),
    (frozenset({"social"}), "Connection/Peer Support"),
)

# Inclusive lower bounds, highest first
PRIORITY_THRESHOLDS: Tuple[Tuple[int, Priority], ...] = (
    (12, Priority.IMMEDIATE),
    (8, Priority.HIGH),
    (4, Priority.MEDIUM),
)


def risk_score(record: IntakeRecord) -> int:
    """Sum every weighted contribution present on the record."""
    score = 0

    if record.severity is not None:
        score += SEVERITY_WEIGHTS[record.severity]

    flags = record.risk_flags
    if flags.self_harm:
        score += SELF_HARM_WEIGHT
    if flags.domestic_abuse:
        score += DOMESTIC_ABUSE_WEIGHT
    if flags.harm_to_others:
        score += HARM_TO_OTHERS_WEIGHT
    if flags.substance_risk:
        score += SUBSTANCE_RISK_WEIGHT

    if record.housing in HOUSING_AT_RISK:
        score += HOUSING_RISK_WEIGHT
    if record.employment_status in EMPLOYMENT_AT_RISK:
        score += EMPLOYMENT_RISK_WEIGHT

    return score


def buckets_for(concerns: FrozenSet[str] | set) -> List[str]:
    """Map selected concern keys to support buckets in canonical order."""
    return [bucket for triggers, bucket in BUCKET_RULES if triggers & concerns]


def priority_for(score: int) -> Priority:
    for threshold, priority in PRIORITY_THRESHOLDS:
        if score >= threshold:
            return priority
    return Priority.LOW


def classify(record: IntakeRecord) -> TriageResult:
    """
    Triage an intake record.

    Pure and side-effect free; safe to call on every field edit.

    Args:
        record: The (possibly incomplete) intake record

    Returns:
        TriageResult with risk score, ordered buckets and priority
    """
    score = risk_score(record)
    return TriageResult(
        risk_score=score,
        buckets=tuple(buckets_for(record.concerns)),
        priority=priority_for(score),
    )
