"""
Triage Domain Layer
===================

Domain layer for intake triage.

Contains:
- Entities: Priority, TriageResult
- Classifier: the fixed scoring formula and bucket table

This layer is framework-agnostic and contains pure business logic.
"""

from src.triage.domain.entities import Priority, TriageResult
from src.triage.domain.classifier import (
    classify,
    risk_score,
    buckets_for,
    priority_for,
    BUCKET_RULES,
    PRIORITY_THRESHOLDS,
)

__all__ = [
    "Priority",
    "TriageResult",
    "classify",
    "risk_score",
    "buckets_for",
    "priority_for",
    "BUCKET_RULES",
    "PRIORITY_THRESHOLDS",
]
