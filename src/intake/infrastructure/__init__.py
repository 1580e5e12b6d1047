"""
Intake Infrastructure Layer
===========================

Infrastructure implementations for the intake module.

Contains:
- External: HTTP transport to the intake endpoint
"""

from src.intake.infrastructure.external import HttpSubmissionTransport

__all__ = ["HttpSubmissionTransport"]
