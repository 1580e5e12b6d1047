"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import Dict, Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class UnknownCatalogKeyError(DomainException):
    """A concern or support preference outside its fixed catalog."""

    def __init__(self, catalog: str, key: str):
        self.catalog = catalog
        self.key = key
        super().__init__(
            f"'{key}' is not a known {catalog} key",
            {"catalog": catalog, "key": key}
        )


class DuplicateSubmissionError(DomainException):
    """A submission is already in flight (or done) for this record."""


class ValidationException(ApplicationException):
    """
    Exception for validation errors.

    Carries the per-field error mapping so callers can surface each
    message inline.
    """

    def __init__(self, errors: Dict[str, str], message: str = "Validation failed"):
        self.errors = dict(errors)
        super().__init__(message, {"errors": self.errors})


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class InsecureRandomSourceError(ConfigurationException):
    """No cryptographically strong random source is available."""

    def __init__(self, details: Optional[dict] = None):
        super().__init__(
            "A secure random source is required to generate idempotency keys",
            details
        )


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class SubmissionFailedError(ExternalServiceException):
    """
    The intake endpoint could not be reached or rejected the submission.

    ``user_message`` is safe to show to the person filling in the form;
    ``details`` holds the diagnostics that only go to the logs.
    """

    def __init__(
        self,
        user_message: str,
        status_code: Optional[int] = None,
        details: Optional[dict] = None
    ):
        self.user_message = user_message
        self.status_code = status_code
        super().__init__("Intake Endpoint", user_message, details)
