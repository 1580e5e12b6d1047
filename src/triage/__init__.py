"""
Triage Module
=============

Bounded Context for intake triage.

Responsibilities:
- Score an intake record's risk from severity, risk flags, housing and
  employment
- Derive topical support buckets from the selected concerns
- Map the score to a review priority

The classifier is a fixed, hand-authored formula, not a rules engine.
"""

__version__ = "1.0.0"
