"""
Shared Kernel Module
====================

This module contains shared infrastructure used across all bounded
contexts (Intake and Triage).

Architecture Pattern: Modular Monolith
- Each module (intake, triage) is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add business logic from Intake or Triage to shared kernel.
"""

__version__ = "1.0.0"
