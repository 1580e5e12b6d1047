"""
Intake Module
=============

Bounded Context for the five-step assistance-request wizard.

Responsibilities:
- Hold one person's in-progress intake record
- Gate each wizard step with per-field validation
- Sanitise and forward completed records to the intake endpoint
"""

__version__ = "1.0.0"
