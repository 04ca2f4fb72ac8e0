"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ScoringException(DomainException):
    """
    Raised when the similarity primitive fails for a single candidate.

    The matcher recovers from it locally; it never reaches the caller.
    """

    def __init__(self, faq_id: str, message: str, details: Optional[dict] = None):
        self.faq_id = faq_id
        super().__init__(
            f"Scoring failed for FAQ {faq_id}: {message}",
            details or {"faq_id": faq_id}
        )


class CorpusUnavailableException(RepositoryException):
    """
    Raised when the FAQ corpus cannot be loaded at all.

    Distinct from an empty match so callers can show a degraded-service
    message instead of a false escalation.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(f"FAQ corpus unavailable: {message}", details)


class FeedbackWriteException(RepositoryException):
    """Raised when a view or rating counter could not be incremented."""

    def __init__(self, faq_id: str, counter: str, message: str, details: Optional[dict] = None):
        self.faq_id = faq_id
        self.counter = counter
        super().__init__(
            f"Failed to increment {counter} for FAQ {faq_id}: {message}",
            details or {"faq_id": faq_id, "counter": counter}
        )


class InvalidStatusTransitionException(DomainException):
    """Raised when an escalation is moved to a status it cannot reach."""

    def __init__(
        self,
        escalation_id: str,
        current_status: str,
        target_status: str,
        details: Optional[dict] = None
    ):
        self.escalation_id = escalation_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Escalation {escalation_id} cannot move from {current_status} to {target_status}",
            details or {
                "escalation_id": escalation_id,
                "current_status": current_status,
                "target_status": target_status,
            }
        )
