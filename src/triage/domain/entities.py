"""
Triage Domain Entities
======================

Result objects for intake triage.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple


class Priority(str, Enum):
    """Coarse review priority, lowest first."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    IMMEDIATE = "Immediate"


@dataclass(frozen=True)
class TriageResult:
    """
    Result of triaging an intake record.

    ``buckets`` is always in canonical display order with no repeats.
    """
    risk_score: int
    buckets: Tuple[str, ...]
    priority: Priority

    def __post_init__(self):
        if self.risk_score < 0:
            raise ValueError("Risk score cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "riskScore": self.risk_score,
            "buckets": list(self.buckets),
            "priority": self.priority.value,
        }
